"""
Form definition scanning for translation discovery.

A form is an object graph: title, pages with button labels, rich-text
messages and a list of fields. Each field kind maps to the properties that
carry translatable text through FIELD_KIND_HANDLERS. Group-like kinds hold
nested fields and are walked recursively. Unknown kinds still contribute
their common properties (label, instructions, placeholder, error message).

Forms may be plain mappings (loaded from JSON) or objects; every property
read goes through ``_get`` and a missing property yields nothing.
"""
import logging
import re
from collections.abc import Mapping

from translation_manager.services.extracted import ExtractedString
from translation_manager.services.rich_text import tiptap_to_html
from translation_manager.services.text_filters import matches_any_pattern

logger = logging.getLogger(__name__)

FIELD_KIND_HANDLERS = {}

# Kinds whose ``fields`` are walked as nested fields
CONTAINER_KINDS = frozenset({'group', 'repeater'})

COMMON_PROPERTIES = (
    ('label', 'label'),
    ('instructions', 'instructions'),
    ('placeholder', 'placeholder'),
    ('error_message', 'error'),
)

PAGE_BUTTONS = (
    ('submit_button_label', 'button.submit'),
    ('back_button_label', 'button.back'),
    ('save_button_label', 'button.save'),
)

FORM_MESSAGES = (
    ('submit_action_message', 'message.submit'),
    ('error_message', 'message.error'),
)

ADDRESS_SUBFIELDS = ('address1', 'address2', 'address3', 'city', 'state', 'zip', 'country')
NAME_SUBFIELDS = ('prefix', 'first_name', 'middle_name', 'last_name')
DATE_SUBFIELDS = ('day', 'month', 'year', 'hour', 'minute', 'second', 'ampm')

_KEBAB_RE = re.compile(r'[^a-z0-9]+')


def _get(obj, name, default=None):
    """Read a property from a mapping or an object, never raising."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        value = obj.get(name, default)
    else:
        value = getattr(obj, name, default)
    return default if value is None else value


def kebab_case(text: str) -> str:
    return _KEBAB_RE.sub('-', text.lower()).strip('-')


def field_kind(*kinds):
    """Register an extraction function for one or more field kinds.

    The function takes the field and yields ``(sub_path, text)`` pairs.
    """
    def decorator(func):
        for kind in kinds:
            FIELD_KIND_HANDLERS[kind] = func
        return func
    return decorator


def _properties(*names):
    """Handler yielding each named property under its own name."""
    def handler(field):
        for name in names:
            yield name, _get(field, name)
    return handler


@field_kind('dropdown', 'radio', 'checkboxes', 'categories', 'entries', 'products', 'tags', 'users', 'variants')
def _option_labels(field):
    for option in _get(field, 'options', []):
        label = _get(option, 'label')
        if not label:
            continue
        value = _get(option, 'value') or kebab_case(str(label))
        yield f'option.{value}', label


@field_kind('agree')
def _agree(field):
    description = _get(field, 'description')
    if description:
        yield 'description', tiptap_to_html(description)
    yield 'checked_value', _get(field, 'checked_value')
    yield 'unchecked_value', _get(field, 'unchecked_value')


def _enabled_subfields(field, subfields, always_enabled=()):
    for sub in subfields:
        if sub not in always_enabled and not _get(field, f'{sub}_enabled', False):
            continue
        yield f'{sub}.label', _get(field, f'{sub}_label')
        yield f'{sub}.placeholder', _get(field, f'{sub}_placeholder')


@field_kind('address')
def _address(field):
    yield from _enabled_subfields(field, ADDRESS_SUBFIELDS)


@field_kind('name')
def _name(field):
    yield from _enabled_subfields(field, NAME_SUBFIELDS, always_enabled=('first_name',))


@field_kind('date')
def _date(field):
    yield from _enabled_subfields(field, DATE_SUBFIELDS)


@field_kind('html')
def _html(field):
    yield 'content', _get(field, 'html_content')


@field_kind('paragraph')
def _paragraph(field):
    yield 'content', _get(field, 'paragraph_content')


@field_kind('heading')
def _heading(field):
    yield 'text', _get(field, 'heading_text')


@field_kind('section')
def _section(field):
    yield 'text', _get(field, 'section_text')


@field_kind('summary')
def _summary(field):
    yield 'text', _get(field, 'summary_text')


@field_kind('recipients')
def _recipients(field):
    for option in _get(field, 'options', []):
        label = _get(option, 'label')
        if label:
            yield f"recipient.{_get(option, 'value') or kebab_case(str(label))}", label


@field_kind('table')
def _table(field):
    columns = _get(field, 'columns', [])
    items = columns.items() if isinstance(columns, Mapping) else enumerate(columns)
    for key, column in items:
        yield f'column.{key}', _get(column, 'heading')
    yield 'add_row_label', _get(field, 'add_row_label')


@field_kind('rating')
def _rating(field):
    if _get(field, 'show_endpoint_labels', False):
        yield 'start_label', _get(field, 'start_label')
        yield 'end_label', _get(field, 'end_label')
    custom_labels = _get(field, 'custom_labels', {})
    if isinstance(custom_labels, Mapping):
        for value, label in custom_labels.items():
            yield f'custom_label.{value}', label


@field_kind('file_upload')
def _file_upload(field):
    yield 'upload_text', _get(field, 'upload_location_text')
    for kind in _get(field, 'allowed_kinds', []):
        yield f'allowed_kind.{kind}', kind


field_kind('repeater')(_properties('add_label', 'remove_label'))
field_kind('payment')(_properties('currency', 'payment_method_label'))
field_kind('phone')(_properties('country_label', 'number_label'))
field_kind('password')(_properties('confirmation_label'))
field_kind('number')(_properties('min_label', 'max_label', 'unit_text'))
field_kind('signature')(_properties('clear_label', 'submit_label'))
field_kind('calculations')(_properties('calculation_label'))


def _no_translatable_properties(field):
    return ()


class FormExtractor:
    """Extract translatable strings from form definitions.

    Categories are ``<prefix>.<form handle>.<field path>.<property>``.
    Forms whose handle or title contains an exclusion pattern are skipped
    entirely unless ``honor_exclusions`` is False.
    """

    def __init__(self, category_prefix: str = 'forms', exclude_patterns=None, handlers=None):
        self.category_prefix = category_prefix
        self.exclude_patterns = list(exclude_patterns or [])
        self.handlers = handlers if handlers is not None else FIELD_KIND_HANDLERS

    def is_excluded(self, form) -> bool:
        handle = _get(form, 'handle', '')
        title = _get(form, 'title', '')
        pattern = matches_any_pattern(str(handle), self.exclude_patterns) or \
            matches_any_pattern(str(title), self.exclude_patterns)
        if pattern:
            logger.info(f"Form '{handle}' excluded by pattern '{pattern}'")
            return True
        return False

    def extract(self, form, honor_exclusions: bool = True):
        """Yield an ExtractedString for every translatable property of ``form``."""
        handle = _get(form, 'handle')
        if not handle:
            logger.warning("Form without a handle skipped")
            return
        if honor_exclusions and self.is_excluded(form):
            return

        base = f'{self.category_prefix}.{handle}'
        origin = f'form:{handle}'

        yield from self._emit(_get(form, 'title'), f'{base}.title', origin)

        for page in _get(form, 'pages', []):
            page_settings = _get(page, 'settings')
            for prop, sub in PAGE_BUTTONS:
                yield from self._emit(_get(page_settings, prop), f'{base}.{sub}', origin)

        form_settings = _get(form, 'settings')
        for prop, sub in FORM_MESSAGES:
            message = _get(form_settings, prop)
            if message:
                yield from self._emit(tiptap_to_html(message), f'{base}.{sub}', origin)

        yield from self._walk_fields(_get(form, 'fields', []), base, origin)

    def _walk_fields(self, fields, base, origin):
        for field in fields:
            field_handle = _get(field, 'handle')
            if not field_handle:
                continue
            path = f'{base}.{field_handle}'

            for prop, sub in COMMON_PROPERTIES:
                yield from self._emit(_get(field, prop), f'{path}.{sub}', origin)

            kind = str(_get(field, 'kind', '')).lower()
            handler = self.handlers.get(kind, _no_translatable_properties)
            for sub, text in handler(field):
                yield from self._emit(text, f'{path}.{sub}', origin)

            if kind in CONTAINER_KINDS:
                yield from self._walk_fields(_get(field, 'fields', []), path, origin)

    @staticmethod
    def _emit(text, category, origin):
        if isinstance(text, str) and text.strip():
            yield ExtractedString(text, category, origin)
