"""
Record store adapter over Flask-SQLAlchemy.

The capture engine only talks to the store through this class. Every write
commits on its own so a failed record never rolls back other locales or
other strings of the same scan.

Uniqueness of (source_hash, locale_id) is kept by the table's unique
constraint plus a KeyedLock around each read-modify-write. A writer that
still loses an insert race (another process without the shared lock)
re-reads the winning row and applies its change as an update.
"""
import logging
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import and_, func, not_, or_
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError

from translation_manager import db
from translation_manager.exceptions import StoreUnavailableError, StoreWriteError
from translation_manager.models import TranslationRecord
from translation_manager.services.locking import KeyedLock

logger = logging.getLogger(__name__)


class SqlRecordStore:
    """Look up, create and update translation records."""

    def __init__(self, session=None, lock: KeyedLock = None):
        self.session = session or db.session
        self.lock = lock or KeyedLock()

    def find_by_hash_and_locale(self, source_hash: str, locale_id: str):
        with self._errors(source_hash, locale_id, write=False):
            return self.session.query(TranslationRecord).filter_by(
                source_hash=source_hash,
                locale_id=locale_id,
            ).first()

    def apply(self, source_hash: str, locale_id: str, create, update):
        """Create or update the record for (source_hash, locale_id) under its lock.

        ``create()`` returns a new TranslationRecord; ``update(record)``
        mutates an existing one in place. Returns ``(record, created)``.

        Raises:
            StoreWriteError: if the record could not be written.
            StoreUnavailableError: if the database or lock service is down.
        """
        with self.lock.hold(source_hash, locale_id):
            record = self.find_by_hash_and_locale(source_hash, locale_id)
            if record is not None:
                with self._errors(source_hash, locale_id):
                    update(record)
                    self.session.commit()
                return record, False

            record = create()
            try:
                with self._errors(source_hash, locale_id):
                    self.session.add(record)
                    self.session.commit()
                return record, True
            except _InsertConflict:
                logger.info(f"Concurrent insert for {source_hash}/{locale_id}, retrying as update")

            record = self.find_by_hash_and_locale(source_hash, locale_id)
            if record is None:
                raise StoreWriteError(
                    f"Record {source_hash}/{locale_id} vanished after insert conflict",
                    source_hash, locale_id,
                )
            with self._errors(source_hash, locale_id):
                update(record)
                self.session.commit()
            return record, False

    def upsert(self, record: TranslationRecord) -> TranslationRecord:
        """Persist ``record``; if its (hash, locale) row exists, copy its state onto that row."""

        def create():
            return record

        def update(existing):
            if existing is record:
                return
            for column in ('source_text', 'translation_key', 'category', 'translated_text',
                           'status', 'usage_count', 'last_seen_at'):
                value = getattr(record, column)
                if value is not None:
                    setattr(existing, column, value)

        stored, _created = self.apply(record.source_hash, record.locale_id, create, update)
        return stored

    def bulk_status_update(self, ids, status: str) -> int:
        """Set ``status`` on the given record ids; returns the number of rows changed."""
        ids = list(ids)
        if not ids:
            return 0
        with self._errors():
            count = self.session.query(TranslationRecord).filter(
                TranslationRecord.id.in_(ids),
            ).update(
                {'status': status, 'updated_at': datetime.utcnow()},
                synchronize_session=False,
            )
            self.session.commit()
        # Loaded instances still hold the old status
        self.session.expire_all()
        return count

    def list_by_scope(self, scope, status: str = None) -> list:
        """All records whose category falls in ``scope``, oldest first."""
        with self._errors(write=False):
            query = self._scoped_query(scope)
            if status:
                query = query.filter(TranslationRecord.status == status)
            return query.order_by(TranslationRecord.id).all()

    def count_by_status(self, scope=None) -> dict:
        with self._errors(write=False):
            query = self.session.query(TranslationRecord.status, func.count(TranslationRecord.id))
            if scope is not None:
                query = query.filter(self._scope_clause(scope))
            return dict(query.group_by(TranslationRecord.status).all())

    def delete_by_scope(self, scope, status: str = None) -> int:
        """Administrative delete; never called by the capture engine."""
        with self._errors():
            query = self._scoped_query(scope)
            if status:
                query = query.filter(TranslationRecord.status == status)
            count = query.delete(synchronize_session=False)
            self.session.commit()
        return count

    def delete_ids(self, ids) -> int:
        """Administrative delete by id."""
        ids = list(ids)
        if not ids:
            return 0
        with self._errors():
            count = self.session.query(TranslationRecord).filter(
                TranslationRecord.id.in_(ids),
            ).delete(synchronize_session=False)
            self.session.commit()
        self.session.expire_all()
        return count

    def _scoped_query(self, scope):
        return self.session.query(TranslationRecord).filter(self._scope_clause(scope))

    @staticmethod
    def _scope_clause(scope):
        clauses = []
        if scope.categories:
            clauses.append(TranslationRecord.category.in_(scope.categories))
        for prefix in scope.prefixes:
            clauses.append(TranslationRecord.category.startswith(prefix, autoescape=True))
        if not clauses:
            # Empty scope selects nothing
            return TranslationRecord.id.is_(None)
        clause = or_(*clauses)
        for prefix in scope.exclude_prefixes:
            clause = and_(clause, not_(TranslationRecord.category.startswith(prefix, autoescape=True)))
        return clause

    @contextmanager
    def _errors(self, source_hash=None, locale_id=None, write=True):
        """Translate SQLAlchemy errors into store errors, rolling back the session."""
        try:
            yield
        except IntegrityError as e:
            self.session.rollback()
            if write:
                raise _InsertConflict(str(e.orig), source_hash, locale_id)
            raise StoreWriteError(str(e.orig), source_hash, locale_id)
        except (OperationalError, InterfaceError) as e:
            self.session.rollback()
            logger.error(f"Record store unavailable: {e}")
            raise StoreUnavailableError(f"Record store unavailable: {e.orig}")
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreWriteError(str(e), source_hash, locale_id)


class _InsertConflict(StoreWriteError):
    """Unique constraint hit while inserting; handled inside ``apply``."""
