"""Transient result type shared by the extractors."""

from typing import NamedTuple


class ExtractedString(NamedTuple):
    """One translatable string found in a source document.

    ``category`` is the namespace it was seen under and ``origin`` describes
    where (template path, or form handle). Not persisted.
    """

    text: str
    category: str
    origin: str
