"""
Scan orchestration: templates and forms into translation records.

Each public method runs one bounded unit of work with its own ScanContext:
1. Extract strings from every source document.
2. Admit each string (skip patterns, template-code guard, source script).
3. Reconcile admitted strings once per document across the locale set.
4. On an exhaustive scan, run the usage checker over the scanned scope.

The usage pass only runs when every source in scope was read successfully;
a template that fails to parse or a form file that fails to load would
otherwise make its strings look unused. Texts produced by the other kind of
source (forms for a template pass, templates for a form pass) count as live
too, so text shared between both is never retired by one of them.

``capture_missing`` covers strings only seen while rendering. They are stored
under the runtime category prefix, which the usage checker never retires.
"""
import logging
from dataclasses import dataclass, field

from flask import current_app
from jinja2 import TemplateSyntaxError

from translation_manager.exceptions import StoreError, TemplateCodeRejected
from translation_manager.services.extracted import ExtractedString
from translation_manager.services.form_extractor import FormExtractor
from translation_manager.services.form_loader import load_forms
from translation_manager.services.locking import KeyedLock
from translation_manager.services.reconciliation import Reconciler
from translation_manager.services.record_store import SqlRecordStore
from translation_manager.services.scripts import get_script_for_language, is_text_in_script
from translation_manager.services.settings import CaptureSettings
from translation_manager.services.template_extractor import (
    TemplateExtractor,
    find_template_files,
    relative_template_path,
)
from translation_manager.services.text_filters import matches_any_pattern, resolve_captured_text
from translation_manager.services.usage import UsageChecker

logger = logging.getLogger(__name__)


@dataclass
class ScanReport:
    """Counts and capped error list returned to the caller of a scan."""

    scanned_sources: int = 0
    skipped_sources: int = 0
    extracted_strings: int = 0
    created: int = 0
    updated: int = 0
    reactivated: int = 0
    marked_unused: int = 0
    usage_checked: bool = False
    error_count: int = 0
    errors: list = field(default_factory=list)
    max_errors: int = 50

    def add_error(self, message: str):
        self.error_count += 1
        if len(self.errors) < self.max_errors:
            self.errors.append(message)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def summary(self) -> str:
        return (
            f"{self.scanned_sources} sources, {self.extracted_strings} strings, "
            f"{self.created} created, {self.reactivated} reactivated, "
            f"{self.marked_unused} marked unused, {self.error_count} errors"
        )

    def to_dict(self):
        return {
            'scanned_sources': self.scanned_sources,
            'skipped_sources': self.skipped_sources,
            'extracted_strings': self.extracted_strings,
            'created': self.created,
            'updated': self.updated,
            'reactivated': self.reactivated,
            'marked_unused': self.marked_unused,
            'usage_checked': self.usage_checked,
            'error_count': self.error_count,
            'errors': list(self.errors),
        }


@dataclass
class ScanContext:
    """State of one scan invocation; discarded when the scan returns."""

    report: ScanReport
    admitted: dict = field(default_factory=dict)  # raw text -> admitted texts
    distinct_texts: set = field(default_factory=set)
    live_texts: set = field(default_factory=set)
    complete: bool = True  # every source in scope was read
    captured: set = field(default_factory=set)  # (text, category, locale) seen by capture_missing


class Scanner:
    """Drive extraction, reconciliation and usage checks for templates and forms."""

    def __init__(self, settings: CaptureSettings, store, reconciler=None, usage_checker=None,
                 template_extractor=None, form_extractor=None):
        self.settings = settings
        self.store = store
        self.reconciler = reconciler or Reconciler(store, settings.source_language)
        self.usage_checker = usage_checker or UsageChecker(store)
        self.template_extractor = template_extractor or TemplateExtractor(
            settings.default_category,
            filter_names=settings.filter_names,
        )
        self.form_extractor = form_extractor or FormExtractor(
            category_prefix=settings.form_category_prefix,
            exclude_patterns=settings.exclude_form_patterns,
        )
        self.source_script = get_script_for_language(settings.source_language)

    @classmethod
    def from_app(cls, app=None):
        """Build a scanner from the Flask config of ``app`` (default: current app)."""
        app = app or current_app
        settings = CaptureSettings.from_config(app.config)
        store = SqlRecordStore(lock=KeyedLock(settings.redis_url))
        return cls(settings, store)

    def new_context(self) -> ScanContext:
        return ScanContext(report=ScanReport(max_errors=self.settings.max_reported_errors))

    # Admission

    def admit(self, text: str, context: ScanContext) -> tuple:
        """Texts to capture for ``text``; empty when it must not be captured."""
        if text not in context.admitted:
            context.admitted[text] = self._admit(text)
        return context.admitted[text]

    def _admit(self, text: str) -> tuple:
        pattern = matches_any_pattern(text, self.settings.skip_patterns)
        if pattern:
            logger.debug(f"Skipped {text[:50]!r}: matches skip pattern '{pattern}'")
            return ()

        try:
            spans = resolve_captured_text(text)
        except TemplateCodeRejected as e:
            logger.warning(f"Skipped {text[:50]!r}: template code ({e.reason})")
            return ()

        if self.settings.filter_non_source_script:
            admitted = []
            for span in spans:
                if is_text_in_script(span, self.source_script):
                    admitted.append(span)
                else:
                    logger.debug(f"Skipped {span[:50]!r}: not in source language script")
            spans = admitted

        return tuple(spans)

    # Templates

    def scan_templates(self, paths=None) -> ScanReport:
        """Capture strings from templates.

        With ``paths`` only those files are scanned and no usage pass runs.
        Without, every template under the templates root is scanned and
        records in the enabled template categories are reconciled for usage.
        """
        context = self.new_context()
        report = context.report

        if not self.settings.site_translations_enabled:
            logger.info("Site translations disabled, template scan skipped")
            return report

        full_scan = paths is None
        files = self._template_files() if full_scan else list(paths)
        enabled = set(self.settings.enabled_categories)

        for path in files:
            report.scanned_sources += 1
            items = self._extract_template(path, context)
            if items is None:
                continue

            seen_in_document = set()
            for item in items:
                context.live_texts.add(item.text)
                if item.category not in enabled:
                    logger.debug(f"{item.origin}: category '{item.category}' not enabled, skipped {item.text[:50]!r}")
                    continue
                if item.text in seen_in_document:
                    continue
                seen_in_document.add(item.text)
                self._reconcile(item, context)

        if full_scan:
            self._run_usage(context, self.settings.template_scope(), shared_source='forms')

        logger.info(f"Template scan finished: {report.summary()}")
        return report

    def preview_templates(self):
        """Extract without writing; returns ``({category: {text: origin}}, report)``."""
        context = self.new_context()
        found = {}
        enabled = set(self.settings.enabled_categories)

        for path in self._template_files():
            context.report.scanned_sources += 1
            for item in self._extract_template(path, context) or []:
                if item.category not in enabled:
                    continue
                found.setdefault(item.category, {}).setdefault(item.text, item.origin)
                context.distinct_texts.add(item.text)

        context.report.extracted_strings = len(context.distinct_texts)
        return found, context.report

    def _template_files(self) -> list:
        return find_template_files(self.settings.templates_path, self.settings.template_extensions)

    def _extract_template(self, path, context):
        """Admitted strings of one template, or None when it cannot be read."""
        origin = relative_template_path(path, self.settings.templates_path)
        try:
            found = list(self.template_extractor.extract_file(path, origin))
        except TemplateSyntaxError as e:
            return self._source_failed(context, f"{origin}: line {e.lineno}: {e.message}")
        except (OSError, UnicodeDecodeError) as e:
            return self._source_failed(context, f"{origin}: {e}")

        items = []
        for item in found:
            for text in self.admit(item.text, context):
                items.append(item._replace(text=text))
        return items

    # Forms

    def capture_form(self, form, context: ScanContext = None) -> ScanReport:
        """Capture one form, e.g. after it was saved. Excluded forms are skipped."""
        context = context or self.new_context()
        report = context.report

        if not self.settings.form_translations_enabled:
            logger.info("Form translations disabled, form capture skipped")
            return report

        if self.form_extractor.is_excluded(form):
            report.skipped_sources += 1
            return report

        report.scanned_sources += 1
        seen_in_document = set()
        for item in self.form_extractor.extract(form, honor_exclusions=False):
            for text in self.admit(item.text, context):
                if text in seen_in_document:
                    continue
                seen_in_document.add(text)
                self._reconcile(item._replace(text=text), context)

        return report

    def check_form_usage(self, forms=None, context: ScanContext = None) -> ScanReport:
        """Usage pass over form records against every current form."""
        context = context or self.new_context()
        report = context.report

        if not self.settings.form_translations_enabled:
            return report

        if forms is None:
            forms = self._load_forms(context)

        self._collect_form_texts(forms, context)
        self._run_usage(context, self.settings.form_scope(), shared_source='templates')
        logger.info(f"Form usage check finished: {report.summary()}")
        return report

    def scan_forms(self, forms=None) -> ScanReport:
        """Capture every form, then run the form usage pass."""
        context = self.new_context()
        if not self.settings.form_translations_enabled:
            logger.info("Form translations disabled, form scan skipped")
            return context.report

        if forms is None:
            forms = self._load_forms(context)

        for form in forms:
            self.capture_form(form, context)

        return self.check_form_usage(forms, context)

    def _load_forms(self, context) -> list:
        forms, errors = load_forms(self.settings.forms_path)
        for message in errors:
            self._source_failed(context, message)
        return forms

    def _collect_form_texts(self, forms, context):
        # Excluded forms still count: their text may be shared with captured forms
        for form in forms:
            for item in self.form_extractor.extract(form, honor_exclusions=False):
                context.live_texts.update(self.admit(item.text, context))

    def _collect_template_texts(self, context):
        for path in self._template_files():
            for item in self._extract_template(path, context) or []:
                context.live_texts.add(item.text)

    # Runtime

    def capture_missing(self, message: str, category: str, locale_id: str, context: ScanContext = None) -> int:
        """Record a string looked up at render time that has no translation yet.

        Call it from the code that resolves translations while rendering, with
        one context per request. The record is created in ``locale_id`` only,
        under ``<runtime prefix>.<category>``; an existing record is left
        untouched. Returns the number of records created.
        """
        if not self.settings.capture_missing_enabled:
            return 0
        if not message or not message.strip():
            return 0
        if category not in self.settings.enabled_categories:
            logger.debug(f"Missing translation in category '{category}' not captured: category not enabled")
            return 0

        locale = self.settings.locales.get(locale_id)
        if locale is None:
            logger.debug(f"Missing translation for locale '{locale_id}' not captured: locale not active")
            return 0

        context = context or self.new_context()
        key = (message, category, locale_id)
        if key in context.captured:
            return 0
        context.captured.add(key)

        runtime_category = f'{self.settings.runtime_category_prefix}.{category}'
        created = 0
        for text in self.admit(message, context):
            try:
                _record, was_created = self.reconciler.capture(
                    ExtractedString(text, runtime_category, 'runtime'), locale,
                )
            except StoreError as e:
                logger.warning(f"Failed to capture missing translation {text[:50]!r} [{locale_id}]: {e}")
                context.report.add_error(f"runtime: {text[:50]!r} [{locale_id}]: {e}")
                continue
            if was_created:
                created += 1

        context.report.created += created
        return created

    # Shared steps

    def _reconcile(self, item, context):
        report = context.report
        context.distinct_texts.add(item.text)
        report.extracted_strings = len(context.distinct_texts)

        outcome = self.reconciler.reconcile(item, self.settings.locales)
        report.created += outcome.created
        report.updated += outcome.updated
        report.reactivated += outcome.reactivated
        for failure in outcome.failures:
            report.add_error(f"{item.origin}: {item.text[:50]!r} [{failure.locale_id}]: {failure}")
        return outcome

    def _run_usage(self, context, scope, shared_source=None):
        if shared_source == 'forms' and self.settings.form_translations_enabled:
            self._collect_form_texts(self._load_forms(context), context)
        elif shared_source == 'templates' and self.settings.site_translations_enabled:
            self._collect_template_texts(context)

        if not context.complete:
            logger.warning(f"Usage check on {scope.describe()} skipped: not every source could be read")
            return None

        result = self.usage_checker.reconcile_usage(context.live_texts, scope)
        context.report.marked_unused += result.marked_unused
        context.report.reactivated += result.reactivated
        context.report.usage_checked = True
        return result

    @staticmethod
    def _source_failed(context, message):
        logger.warning(f"Could not read source: {message}")
        context.report.add_error(message)
        context.complete = False
        return None
