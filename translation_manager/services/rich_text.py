"""Rich-text helpers for form messages stored as TipTap JSON."""
import json
import logging

from markupsafe import escape

logger = logging.getLogger(__name__)


def tiptap_to_html(content):
    """Convert TipTap paragraph JSON to ``<p>`` HTML.

    Strings that are not a JSON array are assumed to be HTML already and are
    returned unchanged, as is anything that fails to parse. Empty paragraphs
    are kept as ``<p></p>`` spacing.
    """
    if not content:
        return ''

    if isinstance(content, str):
        if not content.lstrip().startswith('['):
            return content
        try:
            blocks = json.loads(content)
        except ValueError:
            logger.debug(f"Rich text is not valid JSON, keeping as-is: {content[:50]!r}")
            return content
    else:
        blocks = content

    if not isinstance(blocks, list):
        return content if isinstance(content, str) else ''

    parts = []
    for block in blocks:
        if not isinstance(block, dict) or block.get('type') != 'paragraph':
            continue

        text = ''
        for node in block.get('content') or []:
            if isinstance(node, dict) and node.get('type') == 'text' and node.get('text'):
                text += node['text']

        if text.strip():
            parts.append(f'<p>{escape(text)}</p>')
        else:
            parts.append('<p></p>')

    return ''.join(parts)
