"""Administrative operations on stored records (cleanup and statistics)."""
import logging

from translation_manager.constants import TranslationStatus
from translation_manager.services.text_filters import matches_any_pattern

logger = logging.getLogger(__name__)

SCOPE_TYPES = ('forms', 'site', 'all')


def clean_unused(store, settings, scope_type: str = 'all') -> int:
    """Delete unused records of one scope type; returns the number deleted."""
    scope = settings.scope_for_type(scope_type)
    deleted = store.delete_by_scope(scope, status=TranslationStatus.UNUSED)
    logger.info(f"Deleted {deleted} unused {scope_type} translations")
    return deleted


def find_skip_pattern_matches(store, settings) -> list:
    """Site records whose source text matches a skip pattern; approved records are kept."""
    if not settings.skip_patterns:
        return []
    matches = []
    for record in store.list_by_scope(settings.site_scope()):
        if record.status == TranslationStatus.APPROVED:
            continue
        if matches_any_pattern(record.source_text, settings.skip_patterns):
            matches.append(record)
    return matches


def apply_skip_patterns(store, settings) -> int:
    """Delete site records captured before their text matched a skip pattern."""
    records = find_skip_pattern_matches(store, settings)
    if not records:
        logger.info("No translations match the skip patterns")
        return 0

    deleted = store.delete_ids([record.id for record in records])
    logger.info(f"Deleted {deleted} translations matching skip patterns")
    return deleted


def get_statistics(store, settings) -> dict:
    """Record counts per status, overall and per scope type."""
    stats = {}
    for scope_type in SCOPE_TYPES:
        counts = store.count_by_status(settings.scope_for_type(scope_type))
        row = {status: counts.get(status, 0) for status in TranslationStatus.ALL}
        row['total'] = sum(row.values())
        stats[scope_type] = row
    return stats
