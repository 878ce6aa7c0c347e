"""Locale set used for per-locale fan-out of captured strings."""

from dataclasses import dataclass


def base_language(language: str) -> str:
    """Base language of a locale code ('en-US' -> 'en', 'pt_BR' -> 'pt')."""
    return language.replace('_', '-').split('-')[0].lower()


@dataclass(frozen=True)
class Locale:
    """A target locale; ``id`` is stored on records, ``language`` drives defaults."""

    id: str
    language: str = None

    def __post_init__(self):
        if not self.language:
            object.__setattr__(self, 'language', self.id)

    @property
    def base_language(self) -> str:
        return base_language(self.language)


def is_source_language(language: str, source_language: str) -> bool:
    """Check if a language matches the configured source language.

    Exact match, or matching base language in either direction
    ('en-US' matches source 'en', 'en' matches source 'en-GB').
    """
    if language == source_language:
        return True
    return base_language(language) == base_language(source_language)


class LocaleSet:
    """Ordered, duplicate-free collection of locales."""

    def __init__(self, locales=()):
        self._locales = []
        seen = set()
        for locale in locales:
            if isinstance(locale, str):
                locale = Locale(locale)
            if locale.id in seen:
                continue
            seen.add(locale.id)
            self._locales.append(locale)

    @classmethod
    def from_ids(cls, ids):
        """Build from ids such as ``['en', 'ar']`` or ``['site_ar:ar-SA']`` (id:language)."""
        locales = []
        for entry in ids:
            entry = (entry or '').strip()
            if not entry:
                continue
            locale_id, _, language = entry.partition(':')
            locales.append(Locale(locale_id.strip(), language.strip() or None))
        return cls(locales)

    def __iter__(self):
        return iter(self._locales)

    def __len__(self):
        return len(self._locales)

    def __bool__(self):
        return bool(self._locales)

    def __contains__(self, locale_id):
        return any(locale.id == locale_id for locale in self._locales)

    def get(self, locale_id):
        for locale in self._locales:
            if locale.id == locale_id:
                return locale
        return None

    def __repr__(self):
        return f'LocaleSet({[locale.id for locale in self._locales]!r})'

    @property
    def ids(self) -> list:
        return [locale.id for locale in self._locales]
