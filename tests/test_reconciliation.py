"""Test suite for the reconciliation engine and usage checker."""
from datetime import datetime

import pytest

from translation_manager.constants import CategoryScope, TranslationStatus
from translation_manager.exceptions import StoreUnavailableError, StoreWriteError
from translation_manager.services.extracted import ExtractedString
from translation_manager.services.locales import LocaleSet
from translation_manager.services.reconciliation import Reconciler
from translation_manager.services.record_store import SqlRecordStore
from translation_manager.services.usage import UsageChecker

from conftest import fake


@pytest.fixture
def locales():
    return LocaleSet.from_ids(['en', 'ar'])


@pytest.fixture
def reconciler(store):
    return Reconciler(store, 'en')


def extracted(text, category='messages'):
    return ExtractedString(text, category, 'page.html')


class TestCreate:
    """First observation of a source string."""

    def test_fan_out_one_record_per_locale(self, reconciler, locales, records_for):
        outcome = reconciler.reconcile(extracted('Submit'), locales)

        assert outcome.created == 2
        assert outcome.ok
        assert [r.locale_id for r in records_for('Submit')] == ['ar', 'en']

    def test_source_language_is_translated_to_itself(self, reconciler, locales, records_for):
        reconciler.reconcile(extracted('Submit'), locales)
        ar, en = records_for('Submit')

        assert en.status == TranslationStatus.TRANSLATED
        assert en.translated_text == 'Submit'
        assert ar.status == TranslationStatus.PENDING
        assert ar.translated_text == ''

    def test_regional_source_locale(self, store, records_for):
        Reconciler(store, 'en').reconcile(extracted('Colour'), LocaleSet.from_ids(['en-GB', 'de']))
        de, en_gb = records_for('Colour')

        assert en_gb.status == TranslationStatus.TRANSLATED
        assert de.status == TranslationStatus.PENDING

    def test_new_record_fields(self, store, records_for):
        now = datetime(2026, 1, 2, 3, 4, 5)
        text = fake.sentence(nb_words=4)

        Reconciler(store, 'en', clock=lambda: now).reconcile(extracted(text, 'site'), LocaleSet.from_ids(['fr']))
        record = records_for(text)[0]

        assert record.source_text == text
        assert record.translation_key == text
        assert record.category == 'site'
        assert record.usage_count == 1
        assert record.last_seen_at == now


class TestUpdate:
    """Later observations of an existing source string."""

    def test_second_observation_increments_usage(self, reconciler, locales, records_for):
        reconciler.reconcile(extracted('Submit'), locales)

        outcome = reconciler.reconcile(extracted('Submit', 'forms'), locales)

        assert outcome.created == 0
        assert outcome.updated == 2
        assert all(r.usage_count == 2 for r in records_for('Submit'))
        assert all(r.category == 'forms' for r in records_for('Submit'))

    def test_unused_record_is_reactivated(self, reconciler, locales, make_record, records_for):
        make_record('Back', 'en', status=TranslationStatus.UNUSED, translated_text='Back')
        make_record('Back', 'ar', status=TranslationStatus.UNUSED, translated_text='')

        outcome = reconciler.reconcile(extracted('Back'), locales)
        ar, en = records_for('Back')

        assert outcome.reactivated == 2
        assert en.status == TranslationStatus.TRANSLATED
        assert ar.status == TranslationStatus.PENDING
        assert en.usage_count == 2

    def test_translated_unused_record_returns_to_translated(self, reconciler, make_record, records_for):
        make_record('Next', 'ar', status=TranslationStatus.UNUSED, translated_text='التالي')

        reconciler.reconcile(extracted('Next'), LocaleSet.from_ids(['ar']))

        assert records_for('Next')[0].status == TranslationStatus.TRANSLATED

    def test_approved_record_keeps_status(self, reconciler, make_record, records_for):
        make_record('Approved', 'ar', status=TranslationStatus.APPROVED, translated_text='')

        outcome = reconciler.reconcile(extracted('Approved'), LocaleSet.from_ids(['ar']))
        record = records_for('Approved')[0]

        assert outcome.reactivated == 0
        assert record.status == TranslationStatus.APPROVED
        assert record.usage_count == 2


class FailingLocaleStore(SqlRecordStore):
    """Store that fails writes for one locale."""

    def __init__(self, failing_locale, error_class=StoreWriteError):
        super().__init__()
        self.failing_locale = failing_locale
        self.error_class = error_class

    def apply(self, source_hash, locale_id, create, update):
        if locale_id == self.failing_locale:
            raise self.error_class('disk full', source_hash, locale_id)
        return super().apply(source_hash, locale_id, create, update)


class TestFailures:
    """Per-locale failure isolation."""

    def test_failed_locale_does_not_stop_others(self, db_session, locales, records_for):
        reconciler = Reconciler(FailingLocaleStore('en'), 'en')

        outcome = reconciler.reconcile(extracted('Partial'), locales)

        assert outcome.created == 1
        assert len(outcome.failures) == 1
        assert outcome.failures[0].locale_id == 'en'
        assert [r.locale_id for r in records_for('Partial')] == ['ar']

    def test_store_outage_propagates(self, db_session, locales):
        store = FailingLocaleStore('en', error_class=lambda message, *args: StoreUnavailableError(message))

        with pytest.raises(StoreUnavailableError):
            Reconciler(store, 'en').reconcile(extracted('Down'), locales)


class TestUsageChecker:
    """Marking records unused and reactivating them."""

    def test_marks_missing_text_unused(self, store, make_record):
        live = make_record('Live')
        gone = make_record('Gone', status=TranslationStatus.TRANSLATED, translated_text='Gone')

        result = UsageChecker(store).reconcile_usage({'Live'}, CategoryScope(categories=('messages',)))

        assert result.marked_unused == 1
        assert gone.status == TranslationStatus.UNUSED
        assert live.status == TranslationStatus.PENDING

    def test_reactivates_live_unused_records(self, store, make_record):
        pending = make_record('Again', 'ar', status=TranslationStatus.UNUSED, translated_text='')
        translated = make_record('Again', 'en', status=TranslationStatus.UNUSED, translated_text='Again')

        result = UsageChecker(store).reconcile_usage({'Again'}, CategoryScope(categories=('messages',)))

        assert result.reactivated == 2
        assert pending.status == TranslationStatus.PENDING
        assert translated.status == TranslationStatus.TRANSLATED

    def test_is_idempotent(self, store, make_record):
        make_record('Gone')
        make_record('Back', status=TranslationStatus.UNUSED)
        checker = UsageChecker(store)
        scope = CategoryScope(categories=('messages',))

        first = checker.reconcile_usage({'Back'}, scope)
        second = checker.reconcile_usage({'Back'}, scope)

        assert (first.marked_unused, first.reactivated) == (1, 1)
        assert (second.marked_unused, second.reactivated) == (0, 0)

    def test_approved_records_are_never_touched(self, store, make_record):
        approved = make_record('Signed off', status=TranslationStatus.APPROVED)

        result = UsageChecker(store).reconcile_usage(set(), CategoryScope(categories=('messages',)))

        assert result.marked_unused == 0
        assert approved.status == TranslationStatus.APPROVED

    def test_non_enumerable_categories_stay_in_use(self, store, make_record):
        default = make_record('Submit', category='forms.defaults.submit')
        runtime = make_record('Seen at runtime', category='runtime')
        field = make_record('Old label', category='forms.contact.name.label')
        scope = CategoryScope.everything(non_enumerable_prefixes=('forms.defaults.', 'runtime'))

        result = UsageChecker(store).reconcile_usage(set(), scope)

        assert result.marked_unused == 1
        assert default.status == TranslationStatus.PENDING
        assert runtime.status == TranslationStatus.PENDING
        assert field.status == TranslationStatus.UNUSED

    def test_non_enumerable_prefix_matches_whole_segments(self, store, make_record):
        nested = make_record('Captured at render', category='runtime.messages')
        lookalike = make_record('Admin text', category='runtime_admin')
        plural = make_record('Other text', category='runtimes')
        scope = CategoryScope.everything(non_enumerable_prefixes=('runtime',))

        result = UsageChecker(store).reconcile_usage(set(), scope)

        assert result.marked_unused == 2
        assert nested.status == TranslationStatus.PENDING
        assert lookalike.status == TranslationStatus.UNUSED
        assert plural.status == TranslationStatus.UNUSED

    def test_records_outside_scope_are_ignored(self, store, make_record):
        other = make_record('Form label', category='forms.f.x.label')

        UsageChecker(store).reconcile_usage(set(), CategoryScope(categories=('messages',)))

        assert other.status == TranslationStatus.PENDING

    def test_empty_scope_does_nothing(self, store, make_record):
        make_record('Anything')

        result = UsageChecker(store).reconcile_usage(set(), CategoryScope())

        assert (result.marked_unused, result.reactivated) == (0, 0)
