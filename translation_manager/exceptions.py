"""Exceptions raised by the capture engine and its record store."""


class TranslationManagerError(Exception):
    """Base exception for translation capture errors."""

    pass


class StoreError(TranslationManagerError):
    """Base exception for record store failures."""

    pass


class StoreWriteError(StoreError):
    """A single record could not be written."""

    def __init__(self, message: str, source_hash: str = None, locale_id: str = None):
        super().__init__(message)
        self.source_hash = source_hash
        self.locale_id = locale_id


class StoreUnavailableError(StoreError):
    """The backing database cannot be reached; the scan must stop."""

    pass


class TemplateCodeRejected(TranslationManagerError):
    """A captured literal contains template syntax outside the allowed block form."""

    def __init__(self, reason: str, text: str = ''):
        super().__init__(reason)
        self.reason = reason
        self.text = text


class FormLoadError(TranslationManagerError):
    """A form definition file could not be read or decoded."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path
