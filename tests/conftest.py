"""
Pytest configuration and fixtures for testing the translation capture engine.
"""

import os
import sys
import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from translation_manager import create_app, db
from translation_manager.constants import TranslationStatus
from translation_manager.models import TranslationRecord
from translation_manager.services.hashing import get_text_hash
from translation_manager.services.record_store import SqlRecordStore
from translation_manager.services.scanner import Scanner
from translation_manager.services.settings import CaptureSettings

fake = Faker()


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


@pytest.fixture
def store(db_session):
    return SqlRecordStore()


@pytest.fixture
def template_dir(tmp_path):
    path = tmp_path / 'templates'
    path.mkdir()
    return path


@pytest.fixture
def forms_dir(tmp_path):
    path = tmp_path / 'forms'
    path.mkdir()
    return path


@pytest.fixture
def make_settings(template_dir, forms_dir):
    """Build CaptureSettings for locales en + ar with templates in tmp_path."""
    def _make(**overrides):
        config = {
            'TRANSLATION_SOURCE_LANGUAGE': 'en',
            'TRANSLATION_LOCALES': 'en,ar',
            'TRANSLATION_CATEGORY': 'messages',
            'TRANSLATION_CATEGORIES': 'messages,forms',
            'TEMPLATES_PATH': str(template_dir),
            'TEMPLATE_EXTENSIONS': '.html,.twig',
            'FORMS_PATH': str(forms_dir),
        }
        config.update(overrides)
        return CaptureSettings.from_config(config)
    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def scanner(settings, store):
    return Scanner(settings, store)


@pytest.fixture
def write_template(template_dir):
    """Write a template file below the templates root and return its path."""
    def _write(name, content):
        path = template_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
        return path
    return _write


def create_record(text=None, locale_id='en', category='messages', status=TranslationStatus.PENDING,
                  translated_text='', usage_count=1):
    """Helper to insert a record directly, bypassing the reconciler."""
    text = text or fake.sentence(nb_words=3)
    record = TranslationRecord(
        source_text=text,
        source_hash=get_text_hash(text),
        translation_key=text,
        locale_id=locale_id,
        category=category,
        translated_text=translated_text,
        status=status,
        usage_count=usage_count,
    )
    db.session.add(record)
    db.session.commit()
    return record


def get_records(text):
    """All records for a source text, ordered by locale."""
    return TranslationRecord.query.filter_by(
        source_hash=get_text_hash(text),
    ).order_by(TranslationRecord.locale_id).all()


@pytest.fixture
def make_record(db_session):
    return create_record


@pytest.fixture
def records_for(db_session):
    return get_records
