"""Database models for the translation manager."""

from .translation import TranslationRecord

__all__ = ['TranslationRecord']
