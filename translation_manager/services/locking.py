"""Narrow write locks keyed on (source hash, locale)."""
import logging
import threading
from contextlib import contextmanager

import redis

from translation_manager.exceptions import StoreUnavailableError
from translation_manager.services.redis_client import LOCK_TIMEOUT, LOCK_WAIT, get_redis, lock_key

logger = logging.getLogger(__name__)


class KeyedLock:
    """Serialise read-modify-write of one record.

    Uses a Redis lock when a Redis connection is available, so separate
    worker processes exclude each other; otherwise a process-local lock per
    key. Local locks are dropped once no holder or waiter remains.
    """

    def __init__(self, redis_url: str = None, client=None):
        self._redis = client if client is not None else get_redis(redis_url) if redis_url else None
        self._guard = threading.Lock()
        self._local = {}  # key -> [lock, holders]

    @property
    def distributed(self) -> bool:
        return self._redis is not None

    @contextmanager
    def hold(self, source_hash: str, locale_id: str):
        key = lock_key(source_hash, locale_id)
        if self._redis is not None:
            with self._hold_redis(key):
                yield
        else:
            with self._hold_local(key):
                yield

    @contextmanager
    def _hold_redis(self, key):
        lock = self._redis.lock(key, timeout=LOCK_TIMEOUT, blocking_timeout=LOCK_WAIT)
        try:
            acquired = lock.acquire()
        except redis.RedisError as e:
            logger.error(f"Redis lock error for {key}: {e}")
            raise StoreUnavailableError(f"Lock service unavailable: {e}")
        if not acquired:
            raise StoreUnavailableError(f"Timed out waiting for lock {key}")
        try:
            yield
        finally:
            try:
                lock.release()
            except redis.exceptions.LockError:
                logger.warning(f"Lock {key} expired before release")

    @contextmanager
    def _hold_local(self, key):
        with self._guard:
            entry = self._local.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._local.pop(key, None)
