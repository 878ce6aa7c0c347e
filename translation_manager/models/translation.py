"""Translation record model: one row per source string per locale."""

from datetime import datetime
from translation_manager import db
from translation_manager.constants import TranslationStatus


class TranslationRecord(db.Model):
    """Tracked translation of one source string into one locale."""

    __tablename__ = 'translation_records'

    id = db.Column(db.Integer, primary_key=True)
    source_text = db.Column(db.Text, nullable=False)  # exactly as authored
    source_hash = db.Column(db.String(32), nullable=False, index=True)
    translation_key = db.Column(db.Text, nullable=False)  # same as source_text
    locale_id = db.Column(db.String(12), nullable=False, index=True)  # e.g. 'en', 'ar', 'fr-CA'
    category = db.Column(db.String(255), nullable=False, default='messages', index=True)  # most recent observation
    translated_text = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=TranslationStatus.PENDING, index=True)
    usage_count = db.Column(db.Integer, nullable=False, default=1)

    # Timestamps
    last_seen_at = db.Column(db.DateTime, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # One record per distinct source string per locale
    __table_args__ = (
        db.UniqueConstraint('source_hash', 'locale_id', name='unique_source_locale'),
    )

    def __repr__(self):
        return f'<TranslationRecord {self.id} [{self.locale_id}] {self.status}: {self.source_text[:40]!r}>'

    def reactivation_status(self) -> str:
        """Status this record returns to when its text is seen again."""
        return TranslationStatus.for_translation(self.translated_text)

    @property
    def is_approved(self) -> bool:
        return self.status == TranslationStatus.APPROVED

    def to_dict(self):
        """Convert record to dictionary."""
        return {
            'id': self.id,
            'source_text': self.source_text,
            'source_hash': self.source_hash,
            'translation_key': self.translation_key,
            'locale_id': self.locale_id,
            'category': self.category,
            'translated_text': self.translated_text or '',
            'status': self.status,
            'usage_count': self.usage_count,
            'last_seen_at': self.last_seen_at.isoformat() if self.last_seen_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
