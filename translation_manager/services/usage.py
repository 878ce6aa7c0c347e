"""Usage checker: retire records whose text is no longer produced by any source."""
import logging
from dataclasses import dataclass

from translation_manager.constants import TranslationStatus

logger = logging.getLogger(__name__)


@dataclass
class UsageResult:
    marked_unused: int = 0
    reactivated: int = 0


class UsageChecker:
    """Compare stored records in a scope with the current set of live texts.

    ``live_texts`` must come from a pass over every source in scope. A record
    not in the live set is marked unused; an unused record whose text is live
    again is reactivated. Approved records and records in non-enumerable
    categories are never touched. Running it twice changes nothing the
    second time.
    """

    def __init__(self, store):
        self.store = store

    def reconcile_usage(self, live_texts, scope) -> UsageResult:
        result = UsageResult()
        if scope.is_empty():
            return result

        live_texts = live_texts if isinstance(live_texts, (set, frozenset)) else set(live_texts)

        unused_ids = []
        reactivate_ids = {TranslationStatus.PENDING: [], TranslationStatus.TRANSLATED: []}

        for record in self.store.list_by_scope(scope):
            if record.status == TranslationStatus.APPROVED:
                continue
            if not scope.is_enumerable(record.category):
                continue

            live = record.source_text in live_texts
            if not live and record.status != TranslationStatus.UNUSED:
                unused_ids.append(record.id)
            elif live and record.status == TranslationStatus.UNUSED:
                reactivate_ids[record.reactivation_status()].append(record.id)

        result.marked_unused = self.store.bulk_status_update(unused_ids, TranslationStatus.UNUSED)
        for status, ids in reactivate_ids.items():
            result.reactivated += self.store.bulk_status_update(ids, status)

        if result.marked_unused or result.reactivated:
            logger.info(
                f"Usage check on {scope.describe()}: {result.marked_unused} marked unused, "
                f"{result.reactivated} reactivated"
            )
        return result
