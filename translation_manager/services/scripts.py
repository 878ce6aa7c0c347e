"""Writing-script detection used to skip text not authored in the source language."""
import logging
import re

logger = logging.getLogger(__name__)

# Script family per language code (base codes cover regional variants)
LANGUAGE_SCRIPT_MAP = {
    # Latin script languages
    'en': 'latin', 'de': 'latin', 'fr': 'latin', 'es': 'latin', 'it': 'latin',
    'pt': 'latin', 'nl': 'latin', 'sv': 'latin', 'da': 'latin', 'no': 'latin',
    'fi': 'latin', 'pl': 'latin', 'cs': 'latin', 'sk': 'latin', 'hu': 'latin',
    'ro': 'latin', 'hr': 'latin', 'sl': 'latin', 'et': 'latin', 'lv': 'latin',
    'lt': 'latin', 'id': 'latin', 'ms': 'latin', 'vi': 'latin', 'tr': 'latin',
    'az': 'latin',
    # Arabic script languages
    'ar': 'arabic', 'fa': 'arabic', 'ur': 'arabic', 'ps': 'arabic', 'ku': 'arabic',
    # CJK
    'zh': 'chinese', 'ja': 'japanese', 'ko': 'korean',
    # Cyrillic script languages
    'ru': 'cyrillic', 'uk': 'cyrillic', 'bg': 'cyrillic', 'sr': 'cyrillic',
    'mk': 'cyrillic', 'be': 'cyrillic', 'kk': 'cyrillic', 'ky': 'cyrillic',
    'he': 'hebrew', 'yi': 'hebrew',
    'el': 'greek',
    'th': 'thai',
    # Indic scripts
    'hi': 'devanagari', 'mr': 'devanagari', 'ne': 'devanagari', 'sa': 'devanagari',
    'bn': 'bengali', 'ta': 'tamil', 'te': 'telugu', 'kn': 'kannada',
    'ml': 'malayalam', 'gu': 'gujarati', 'pa': 'gurmukhi',
    'ka': 'georgian', 'hy': 'armenian',
}

SCRIPT_PATTERNS = {
    'latin': re.compile(r'[\u0041-\u007A\u00C0-\u00FF\u0100-\u017F\u0180-\u024F]'),
    'arabic': re.compile(r'[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF]'),
    'chinese': re.compile(r'[\u4E00-\u9FFF\u3400-\u4DBF\U00020000-\U0002A6DF]'),
    'japanese': re.compile(r'[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FFF]'),
    'korean': re.compile(r'[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F]'),
    'cyrillic': re.compile(r'[\u0400-\u04FF\u0500-\u052F]'),
    'hebrew': re.compile(r'[\u0590-\u05FF\uFB1D-\uFB4F]'),
    'greek': re.compile(r'[\u0370-\u03FF\u1F00-\u1FFF]'),
    'thai': re.compile(r'[\u0E00-\u0E7F]'),
    'devanagari': re.compile(r'[\u0900-\u097F\uA8E0-\uA8FF]'),
    'bengali': re.compile(r'[\u0980-\u09FF]'),
    'tamil': re.compile(r'[\u0B80-\u0BFF]'),
    'telugu': re.compile(r'[\u0C00-\u0C7F]'),
    'kannada': re.compile(r'[\u0C80-\u0CFF]'),
    'malayalam': re.compile(r'[\u0D00-\u0D7F]'),
    'gujarati': re.compile(r'[\u0A80-\u0AFF]'),
    'gurmukhi': re.compile(r'[\u0A00-\u0A7F]'),
    'georgian': re.compile(r'[\u10A0-\u10FF]'),
    'armenian': re.compile(r'[\u0530-\u058F]'),
}

NON_LATIN_SCRIPTS = [name for name in SCRIPT_PATTERNS if name != 'latin']


def get_script_for_language(language_code: str) -> str:
    """Script family for a language code; unknown codes default to latin."""
    code = language_code.replace('_', '-')
    script = LANGUAGE_SCRIPT_MAP.get(code) or LANGUAGE_SCRIPT_MAP.get(code.split('-')[0].lower())
    if script is None:
        logger.warning(f"Unknown language code '{language_code}', defaulting to latin script")
        return 'latin'
    return script


def text_contains_script(text: str, script: str) -> bool:
    pattern = SCRIPT_PATTERNS.get(script)
    if pattern is None:
        return True
    return pattern.search(text) is not None


def is_text_in_source_language(text: str, source_language: str) -> bool:
    """Check if text appears to be written in the source language's script.

    For a Latin source, any character from another script disqualifies the
    text. For any other source, the text must contain at least one character
    of that script. Blank text passes.
    """
    return is_text_in_script(text, get_script_for_language(source_language))


def is_text_in_script(text: str, source_script: str) -> bool:
    """Same check against an already resolved script family."""
    if not text.strip():
        return True

    if source_script == 'latin':
        for script in NON_LATIN_SCRIPTS:
            if text_contains_script(text, script):
                logger.debug(f"Text contains non-source script {script}: {text[:50]!r}")
                return False
        return True

    if not text_contains_script(text, source_script):
        logger.debug(f"Text does not contain source script {source_script}: {text[:50]!r}")
        return False
    return True
