"""Redis client for locks shared across scan workers."""

import os
import redis
import logging

logger = logging.getLogger(__name__)

# Redis connections by URL (lazy initialization)
_redis_clients = {}


def get_redis(redis_url: str = None):
    """Get or create a Redis connection; None when Redis is not configured or unreachable."""
    redis_url = redis_url or os.environ.get('REDIS_URL')

    if not redis_url:
        return None

    if redis_url in _redis_clients:
        return _redis_clients[redis_url]

    try:
        client = redis.from_url(redis_url)
        # Test connection
        client.ping()
        logger.info("Redis connected successfully")
    except redis.RedisError as e:
        logger.error(f"Redis connection failed: {e}")
        return None

    _redis_clients[redis_url] = client
    return client


LOCK_PREFIX = "translation:lock:"
LOCK_TIMEOUT = 30  # seconds a held lock survives a crashed holder
LOCK_WAIT = 10  # seconds to wait for a busy lock


def lock_key(source_hash: str, locale_id: str) -> str:
    return f"{LOCK_PREFIX}{source_hash}:{locale_id}"
