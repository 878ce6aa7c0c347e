"""Content hash identifying a source string.

The hash is the dedup key for translation records together with the
locale, so it must never change for a given input. Bump HASH_VERSION and
migrate stored hashes if the algorithm is ever changed.
"""
import hashlib

HASH_VERSION = 1
HASH_LENGTH = 32  # hex characters, 128 bits


def get_text_hash(text: str) -> str:
    """Hash the UTF-8 bytes of ``text`` verbatim (no trimming, no normalization)."""
    return hashlib.sha256(text.encode('utf-8')).hexdigest()[:HASH_LENGTH]
