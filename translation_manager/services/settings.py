"""Capture settings read from the Flask config."""
from dataclasses import dataclass, field

from translation_manager.constants import CategoryScope
from translation_manager.services.locales import LocaleSet
from translation_manager.services.text_filters import normalize_patterns


def split_list(value) -> list:
    """Comma-separated string or list -> list of trimmed, non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def as_bool(value, default=False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


@dataclass(frozen=True)
class CaptureSettings:
    """Read-only settings for one capture run."""

    locales: LocaleSet
    source_language: str = 'en'
    default_category: str = 'messages'
    enabled_categories: tuple = ('messages',)
    filter_names: tuple = ('t', 'translate')
    templates_path: str = 'templates'
    template_extensions: tuple = ('.html', '.jinja', '.j2', '.twig', '.txt')
    forms_path: str = 'forms'
    form_category_prefix: str = 'forms'
    skip_patterns: tuple = ()
    exclude_form_patterns: tuple = ()
    non_enumerable_prefixes: tuple = ('forms.defaults.', 'runtime')
    site_translations_enabled: bool = True
    form_translations_enabled: bool = True
    filter_non_source_script: bool = True
    capture_missing_enabled: bool = False
    runtime_category_prefix: str = 'runtime'
    max_reported_errors: int = 50
    redis_url: str = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config):
        default_category = config.get('TRANSLATION_CATEGORY') or 'messages'
        enabled = split_list(config.get('TRANSLATION_CATEGORIES')) or [default_category]
        if default_category not in enabled:
            enabled.insert(0, default_category)

        locale_ids = split_list(config.get('TRANSLATION_LOCALES'))
        source_language = config.get('TRANSLATION_SOURCE_LANGUAGE') or 'en'

        # Render-time captures can never be enumerated by a scan
        runtime_prefix = (config.get('RUNTIME_CATEGORY_PREFIX') or 'runtime').rstrip('.')
        non_enumerable = split_list(config.get('NON_ENUMERABLE_CATEGORIES', 'forms.defaults.'))
        if runtime_prefix not in non_enumerable:
            non_enumerable.append(runtime_prefix)

        return cls(
            locales=LocaleSet.from_ids(locale_ids or [source_language]),
            source_language=source_language,
            default_category=default_category,
            enabled_categories=tuple(enabled),
            filter_names=tuple(split_list(config.get('TRANSLATION_FILTERS')) or ['t', 'translate']),
            templates_path=config.get('TEMPLATES_PATH') or 'templates',
            template_extensions=tuple(split_list(config.get('TEMPLATE_EXTENSIONS'))) or cls.template_extensions,
            forms_path=config.get('FORMS_PATH') or 'forms',
            form_category_prefix=(config.get('FORM_CATEGORY_PREFIX') or 'forms').rstrip('.'),
            skip_patterns=tuple(normalize_patterns(split_list(config.get('SKIP_PATTERNS')))),
            exclude_form_patterns=tuple(normalize_patterns(split_list(config.get('EXCLUDE_FORM_PATTERNS')))),
            non_enumerable_prefixes=tuple(non_enumerable),
            site_translations_enabled=as_bool(config.get('ENABLE_SITE_TRANSLATIONS'), True),
            form_translations_enabled=as_bool(config.get('ENABLE_FORM_TRANSLATIONS'), True),
            filter_non_source_script=as_bool(config.get('FILTER_NON_SOURCE_SCRIPT'), True),
            capture_missing_enabled=as_bool(config.get('CAPTURE_MISSING_TRANSLATIONS'), False),
            runtime_category_prefix=runtime_prefix,
            max_reported_errors=int(config.get('MAX_REPORTED_ERRORS') or 50),
            redis_url=config.get('REDIS_URL') or None,
        )

    def template_scope(self) -> CategoryScope:
        """Records a full template scan is authoritative for."""
        return CategoryScope(
            categories=self.enabled_categories,
            non_enumerable_prefixes=self.non_enumerable_prefixes,
        )

    def site_scope(self) -> CategoryScope:
        """Every record not captured from a form."""
        return CategoryScope.everything(
            exclude_prefixes=(f'{self.form_category_prefix}.',),
            non_enumerable_prefixes=self.non_enumerable_prefixes,
        )

    def scope_for_type(self, scope_type: str) -> CategoryScope:
        """'forms', 'site' or 'all'."""
        if scope_type == 'forms':
            return self.form_scope()
        if scope_type == 'site':
            return self.site_scope()
        if scope_type == 'all':
            return CategoryScope.everything(non_enumerable_prefixes=self.non_enumerable_prefixes)
        raise ValueError(f"Unknown scope type '{scope_type}'")

    def form_scope(self) -> CategoryScope:
        """Records a full form scan is authoritative for."""
        return CategoryScope(
            prefixes=(f'{self.form_category_prefix}.',),
            non_enumerable_prefixes=self.non_enumerable_prefixes,
        )
