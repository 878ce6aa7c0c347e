"""Test suite for form definition scanning."""
import json
from types import SimpleNamespace

import pytest

from translation_manager.exceptions import FormLoadError
from translation_manager.services.form_extractor import FormExtractor, kebab_case
from translation_manager.services.form_loader import load_form_file, load_forms


@pytest.fixture
def extractor():
    return FormExtractor(category_prefix='forms', exclude_patterns=['test'])


def by_category(extractor, form, **kwargs):
    return {item.category: item.text for item in extractor.extract(form, **kwargs)}


def contact_form():
    return {
        'handle': 'contact',
        'title': 'Contact us',
        'pages': [
            {'settings': {'submit_button_label': 'Send', 'back_button_label': 'Back'}},
            {'settings': {'submit_button_label': 'Finish', 'save_button_label': ''}},
        ],
        'settings': {
            'submit_action_message': '[{"type": "paragraph", "content": [{"type": "text", "text": "Thank you"}]}]',
            'error_message': '<p>Please fix the errors</p>',
        },
        'fields': [
            {
                'kind': 'single_line_text',
                'handle': 'email',
                'label': 'Email address',
                'instructions': 'We never share it',
                'placeholder': 'you@example.com',
                'error_message': 'Email is required',
            },
            {
                'kind': 'dropdown',
                'handle': 'topic',
                'label': 'Topic',
                'options': [
                    {'label': 'Sales', 'value': 'sales'},
                    {'label': 'Customer Support'},
                    {'label': '', 'value': 'empty'},
                ],
            },
        ],
    }


class TestFormLevelStrings:
    """Title, page buttons and messages."""

    def test_title_buttons_and_messages(self, extractor):
        found = by_category(extractor, contact_form())

        assert found['forms.contact.title'] == 'Contact us'
        assert found['forms.contact.button.back'] == 'Back'
        assert found['forms.contact.message.submit'] == '<p>Thank you</p>'
        assert found['forms.contact.message.error'] == '<p>Please fix the errors</p>'
        assert 'forms.contact.button.save' not in found

    def test_every_page_contributes_buttons(self, extractor):
        texts = [item.text for item in extractor.extract(contact_form()) if item.category == 'forms.contact.button.submit']

        assert texts == ['Send', 'Finish']

    def test_origin_names_the_form(self, extractor):
        assert {item.origin for item in extractor.extract(contact_form())} == {'form:contact'}

    def test_form_without_handle_yields_nothing(self, extractor):
        assert list(extractor.extract({'title': 'Nameless'})) == []

    def test_object_forms_are_supported(self, extractor):
        form = SimpleNamespace(
            handle='newsletter',
            title='Newsletter',
            pages=[SimpleNamespace(settings=SimpleNamespace(submit_button_label='Subscribe'))],
            settings=None,
            fields=[SimpleNamespace(kind='email', handle='email', label='Your email')],
        )

        found = by_category(extractor, form)

        assert found == {
            'forms.newsletter.title': 'Newsletter',
            'forms.newsletter.button.submit': 'Subscribe',
            'forms.newsletter.email.label': 'Your email',
        }


class TestFieldKinds:
    """Per-kind translatable properties."""

    def test_common_properties_for_unknown_kind(self, extractor):
        found = by_category(extractor, contact_form())

        assert found['forms.contact.email.label'] == 'Email address'
        assert found['forms.contact.email.instructions'] == 'We never share it'
        assert found['forms.contact.email.placeholder'] == 'you@example.com'
        assert found['forms.contact.email.error'] == 'Email is required'

    def test_option_labels(self, extractor):
        found = by_category(extractor, contact_form())

        assert found['forms.contact.topic.option.sales'] == 'Sales'
        assert found['forms.contact.topic.option.customer-support'] == 'Customer Support'
        assert 'forms.contact.topic.option.empty' not in found

    def test_enabled_subfields_only(self, extractor):
        form = {'handle': 'f', 'fields': [{
            'kind': 'address',
            'handle': 'addr',
            'city_enabled': True,
            'city_label': 'City',
            'city_placeholder': 'Your city',
            'zip_enabled': False,
            'zip_label': 'Postcode',
        }, {
            'kind': 'name',
            'handle': 'name',
            'first_name_label': 'First name',
            'middle_name_label': 'Middle name',
        }, {
            'kind': 'date',
            'handle': 'when',
            'day_enabled': True,
            'day_label': 'Day',
            'year_label': 'Year',
        }]}

        found = by_category(extractor, form)

        assert found == {
            'forms.f.addr.city.label': 'City',
            'forms.f.addr.city.placeholder': 'Your city',
            'forms.f.name.first_name.label': 'First name',
            'forms.f.when.day.label': 'Day',
        }

    def test_content_fields(self, extractor):
        form = {'handle': 'f', 'fields': [
            {'kind': 'html', 'handle': 'intro', 'html_content': '<p>Welcome</p>'},
            {'kind': 'heading', 'handle': 'h', 'heading_text': 'Details'},
            {'kind': 'paragraph', 'handle': 'p', 'paragraph_content': 'Some text'},
            {'kind': 'section', 'handle': 's', 'section_text': 'Part two'},
            {'kind': 'summary', 'handle': 'sum', 'summary_text': 'Review your answers'},
        ]}

        found = by_category(extractor, form)

        assert found == {
            'forms.f.intro.content': '<p>Welcome</p>',
            'forms.f.h.text': 'Details',
            'forms.f.p.content': 'Some text',
            'forms.f.s.text': 'Part two',
            'forms.f.sum.text': 'Review your answers',
        }

    def test_agree_field(self, extractor):
        form = {'handle': 'f', 'fields': [{
            'kind': 'agree',
            'handle': 'terms',
            'description': [{'type': 'paragraph', 'content': [{'type': 'text', 'text': 'I agree'}]}],
            'checked_value': 'Yes',
            'unchecked_value': 'No',
        }]}

        found = by_category(extractor, form)

        assert found == {
            'forms.f.terms.description': '<p>I agree</p>',
            'forms.f.terms.checked_value': 'Yes',
            'forms.f.terms.unchecked_value': 'No',
        }

    def test_table_rating_and_upload(self, extractor):
        form = {'handle': 'f', 'fields': [
            {'kind': 'table', 'handle': 't', 'columns': [{'heading': 'Item'}, {'heading': 'Qty'}],
             'add_row_label': 'Add row'},
            {'kind': 'rating', 'handle': 'r', 'show_endpoint_labels': True, 'start_label': 'Poor',
             'end_label': 'Great', 'custom_labels': {'3': 'Okay', '4': ''}},
            {'kind': 'rating', 'handle': 'r2', 'start_label': 'Hidden'},
            {'kind': 'file_upload', 'handle': 'u', 'upload_location_text': 'Drop files', 'allowed_kinds': ['pdf']},
        ]}

        found = by_category(extractor, form)

        assert found == {
            'forms.f.t.column.0': 'Item',
            'forms.f.t.column.1': 'Qty',
            'forms.f.t.add_row_label': 'Add row',
            'forms.f.r.start_label': 'Poor',
            'forms.f.r.end_label': 'Great',
            'forms.f.r.custom_label.3': 'Okay',
            'forms.f.u.upload_text': 'Drop files',
            'forms.f.u.allowed_kind.pdf': 'pdf',
        }

    def test_simple_property_kinds(self, extractor):
        form = {'handle': 'f', 'fields': [
            {'kind': 'phone', 'handle': 'ph', 'country_label': 'Country', 'number_label': 'Number'},
            {'kind': 'password', 'handle': 'pw', 'confirmation_label': 'Repeat password'},
            {'kind': 'number', 'handle': 'n', 'min_label': 'Min', 'unit_text': 'kg'},
            {'kind': 'signature', 'handle': 'sig', 'clear_label': 'Clear'},
            {'kind': 'calculations', 'handle': 'c', 'calculation_label': 'Total'},
            {'kind': 'payment', 'handle': 'pay', 'payment_method_label': 'Card'},
            {'kind': 'recipients', 'handle': 'to', 'options': [{'label': 'Sales team', 'value': 'sales'}]},
        ]}

        found = by_category(extractor, form)

        assert found == {
            'forms.f.ph.country_label': 'Country',
            'forms.f.ph.number_label': 'Number',
            'forms.f.pw.confirmation_label': 'Repeat password',
            'forms.f.n.min_label': 'Min',
            'forms.f.n.unit_text': 'kg',
            'forms.f.sig.clear_label': 'Clear',
            'forms.f.c.calculation_label': 'Total',
            'forms.f.pay.payment_method_label': 'Card',
            'forms.f.to.recipient.sales': 'Sales team',
        }

    def test_group_fields_are_walked(self, extractor):
        form = {'handle': 'f', 'fields': [{
            'kind': 'group',
            'handle': 'details',
            'label': 'Details',
            'fields': [
                {'kind': 'phone', 'handle': 'phone', 'label': 'Phone', 'country_label': 'Code'},
                {'kind': 'group', 'handle': 'inner', 'fields': [{'kind': 'text', 'handle': 'x', 'label': 'Deep'}]},
            ],
        }]}

        found = by_category(extractor, form)

        assert found == {
            'forms.f.details.label': 'Details',
            'forms.f.details.phone.label': 'Phone',
            'forms.f.details.phone.country_label': 'Code',
            'forms.f.details.inner.x.label': 'Deep',
        }

    def test_missing_and_malformed_properties_are_ignored(self, extractor):
        form = {'handle': 'f', 'fields': [
            {'kind': 'dropdown', 'handle': 'd', 'label': None},
            {'kind': 'table', 'handle': 't', 'columns': {'a': {}}},
            {'kind': 'text', 'label': 'No handle'},
            {'kind': 'rating', 'handle': 'r', 'custom_labels': ['not', 'a', 'mapping']},
            {'handle': 'nokind', 'label': 12},
        ]}

        assert list(extractor.extract(form)) == []


class TestFormExclusion:
    """Exclusion patterns matched against handle and title."""

    def test_excluded_by_handle(self, extractor):
        assert list(extractor.extract({'handle': 'testForm', 'title': 'Form'})) == []

    def test_excluded_by_title(self, extractor):
        assert list(extractor.extract({'handle': 'form', 'title': 'A TEST form'})) == []

    def test_exclusion_can_be_bypassed(self, extractor):
        found = by_category(extractor, {'handle': 'testForm', 'title': 'Form'}, honor_exclusions=False)

        assert found == {'forms.testForm.title': 'Form'}

    def test_kebab_case(self):
        assert kebab_case('Customer  Support!') == 'customer-support'


class TestFormLoader:
    """Loading JSON form definitions."""

    def test_load_forms(self, forms_dir):
        (forms_dir / 'contact.json').write_text(json.dumps({'title': 'Contact'}), encoding='utf-8')
        (forms_dir / 'broken.json').write_text('{not json', encoding='utf-8')
        (forms_dir / 'readme.txt').write_text('ignored', encoding='utf-8')

        forms, errors = load_forms(str(forms_dir))

        assert forms == [{'title': 'Contact', 'handle': 'contact'}]
        assert len(errors) == 1
        assert 'broken.json' in errors[0]

    def test_non_object_file_is_rejected(self, forms_dir):
        path = forms_dir / 'list.json'
        path.write_text('[]', encoding='utf-8')

        with pytest.raises(FormLoadError):
            load_form_file(str(path))

    def test_missing_directory(self, tmp_path):
        assert load_forms(str(tmp_path / 'missing')) == ([], [])
