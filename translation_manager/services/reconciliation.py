"""
Reconciliation of extracted strings against stored translation records.

For every locale an extracted string either creates a record or updates the
existing one:
- New records in a locale whose language is the source language start as
  ``translated`` with the source text as translation; others start
  ``pending`` with an empty translation.
- Existing records get usage_count + 1, last_seen_at = now and the current
  category. An ``unused`` record is reactivated to ``translated`` or
  ``pending`` depending on whether it has a translation.
- ``approved`` records never have their status changed here.

Locales are written independently: a failed locale is reported and the
remaining locales are still processed.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from translation_manager.constants import TranslationStatus
from translation_manager.exceptions import StoreWriteError
from translation_manager.models import TranslationRecord
from translation_manager.services.hashing import get_text_hash
from translation_manager.services.locales import is_source_language

logger = logging.getLogger(__name__)


@dataclass
class ReconcileOutcome:
    """Result of reconciling one extracted string across a locale set."""

    records: list = field(default_factory=list)
    created: int = 0
    updated: int = 0
    reactivated: int = 0
    failures: list = field(default_factory=list)  # StoreWriteError per failed locale

    @property
    def ok(self) -> bool:
        return not self.failures


class Reconciler:
    """Create, update or reactivate the per-locale records of a source string."""

    def __init__(self, store, source_language: str, clock=datetime.utcnow):
        self.store = store
        self.source_language = source_language
        self.clock = clock

    def reconcile(self, extracted, locales) -> ReconcileOutcome:
        """Fan ``extracted`` out to one record per locale.

        Raises:
            StoreUnavailableError: if the store is unreachable; the caller
                must stop the scan.
        """
        outcome = ReconcileOutcome()
        source_hash = get_text_hash(extracted.text)

        for locale in locales:
            try:
                record, created, reactivated = self._reconcile_locale(extracted, source_hash, locale)
            except StoreWriteError as e:
                logger.warning(
                    f"Failed to save translation {extracted.text[:50]!r} "
                    f"[{locale.id}] in category '{extracted.category}': {e}"
                )
                outcome.failures.append(e)
                continue

            outcome.records.append(record)
            if created:
                outcome.created += 1
            else:
                outcome.updated += 1
            if reactivated:
                outcome.reactivated += 1

        return outcome

    def capture(self, extracted, locale):
        """Create the record of ``extracted`` in one locale unless it already exists.

        Used for strings seen only at render time: an existing record is left
        exactly as it is. Returns ``(record, created)``.
        """
        source_hash = get_text_hash(extracted.text)
        now = self.clock()

        record, created = self.store.apply(
            source_hash,
            locale.id,
            lambda: self._new_record(extracted, source_hash, locale, now),
            lambda record: None,
        )
        if created:
            logger.info(f"Captured missing translation [{locale.id}] {extracted.text[:50]!r} ({extracted.category})")
        return record, created

    def _new_record(self, extracted, source_hash, locale, now):
        translated = is_source_language(locale.language, self.source_language)
        return TranslationRecord(
            source_text=extracted.text,
            source_hash=source_hash,
            translation_key=extracted.text,
            locale_id=locale.id,
            category=extracted.category,
            translated_text=extracted.text if translated else '',
            status=TranslationStatus.TRANSLATED if translated else TranslationStatus.PENDING,
            usage_count=1,
            last_seen_at=now,
        )

    def _reconcile_locale(self, extracted, source_hash, locale):
        now = self.clock()
        reactivated = False

        def create():
            return self._new_record(extracted, source_hash, locale, now)

        def update(record):
            nonlocal reactivated
            record.usage_count = (record.usage_count or 0) + 1
            record.last_seen_at = now
            record.category = extracted.category
            if record.status == TranslationStatus.UNUSED:
                record.status = record.reactivation_status()
                reactivated = True

        record, created = self.store.apply(source_hash, locale.id, create, update)

        if created:
            logger.info(f"Created translation [{locale.id}] {extracted.text[:50]!r} ({extracted.category})")
        elif reactivated:
            logger.info(f"Reactivated translation [{locale.id}] {extracted.text[:50]!r} as {record.status}")

        return record, created, reactivated
