"""Translation record status values.

pending -> translated -> unused -> pending|translated (reactivation).
approved is set by an editor and is never overwritten by a scan.
"""


class TranslationStatus:
    PENDING = 'pending'
    TRANSLATED = 'translated'
    APPROVED = 'approved'
    UNUSED = 'unused'

    ALL = (PENDING, TRANSLATED, APPROVED, UNUSED)

    # Statuses a scan is allowed to write
    AUTOMATIC = (PENDING, TRANSLATED, UNUSED)

    @staticmethod
    def for_translation(translated_text) -> str:
        """Status an active record takes given its translation text."""
        return TranslationStatus.TRANSLATED if translated_text else TranslationStatus.PENDING
