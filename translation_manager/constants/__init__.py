"""Constants shared by the capture engine, the store and the CLI."""

from .statuses import TranslationStatus
from .scopes import CategoryScope

__all__ = ['TranslationStatus', 'CategoryScope']
