"""Admission rules applied to captured text before it is hashed."""
import logging
import re

from translation_manager.exceptions import TemplateCodeRejected
from translation_manager.services.token_guard import extract_block_bodies

logger = logging.getLogger(__name__)

# Opening delimiters of expression, statement and comment blocks
TEMPLATE_CODE_RE = re.compile(r'\{\{|\{%|\{#')
WORD_RE = re.compile(r'\w')


def contains_template_code(text: str) -> bool:
    """Check if text contains template delimiters."""
    return TEMPLATE_CODE_RE.search(text) is not None


def is_meaningful(text: str) -> bool:
    """More than one character and at least one word character."""
    return len(text) > 1 and WORD_RE.search(text) is not None


def resolve_captured_text(text: str) -> list:
    """Return the strings that may be captured for ``text``.

    Plain text is returned as-is. Text containing template code is only
    accepted in the component-block form, in which case the trimmed plain
    text inside each block is returned instead.

    Raises:
        TemplateCodeRejected: when the text holds template code and no
            plain-text block content can be recovered.
    """
    if not contains_template_code(text):
        return [text]

    spans = []
    for body in extract_block_bodies(text):
        body = body.strip()
        if not body or contains_template_code(body):
            continue
        if is_meaningful(body):
            spans.append(body)

    if not spans:
        raise TemplateCodeRejected('component blocks hold no plain text', text)
    return spans


def normalize_patterns(patterns) -> list:
    """Trim patterns and drop empty ones."""
    return [p.strip() for p in (patterns or []) if p and p.strip()]


def matches_any_pattern(text: str, patterns) -> str | None:
    """Return the first pattern found in ``text`` (case-insensitive substring), else None."""
    if not text:
        return None
    lowered = text.lower()
    for pattern in normalize_patterns(patterns):
        if pattern.lower() in lowered:
            return pattern
    return None

