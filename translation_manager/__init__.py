from flask import Flask
from flask_sqlalchemy import SQLAlchemy
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()


def _database_url(config_name):
    if config_name == 'testing':
        return 'sqlite:///:memory:'
    url = os.getenv('DATABASE_URL', 'sqlite:///translations.db')
    # Handle postgres:// vs postgresql:// issue
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def create_app(config_name='development', overrides=None):
    app = Flask(__name__)

    # Config
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_url(config_name)
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['TESTING'] = config_name == 'testing'

    app.config['TRANSLATION_SOURCE_LANGUAGE'] = os.getenv('TRANSLATION_SOURCE_LANGUAGE', 'en')
    app.config['TRANSLATION_LOCALES'] = os.getenv('TRANSLATION_LOCALES', 'en')
    app.config['TRANSLATION_CATEGORY'] = os.getenv('TRANSLATION_CATEGORY', 'messages')
    app.config['TRANSLATION_CATEGORIES'] = os.getenv('TRANSLATION_CATEGORIES', '')
    app.config['TRANSLATION_FILTERS'] = os.getenv('TRANSLATION_FILTERS', 't,translate')
    app.config['TEMPLATES_PATH'] = os.getenv('TEMPLATES_PATH', 'templates')
    app.config['TEMPLATE_EXTENSIONS'] = os.getenv('TEMPLATE_EXTENSIONS', '.html,.jinja,.j2,.twig,.txt')
    app.config['FORMS_PATH'] = os.getenv('FORMS_PATH', 'forms')
    app.config['FORM_CATEGORY_PREFIX'] = os.getenv('FORM_CATEGORY_PREFIX', 'forms')
    app.config['SKIP_PATTERNS'] = os.getenv('SKIP_PATTERNS', '')
    app.config['EXCLUDE_FORM_PATTERNS'] = os.getenv('EXCLUDE_FORM_PATTERNS', '')
    app.config['NON_ENUMERABLE_CATEGORIES'] = os.getenv('NON_ENUMERABLE_CATEGORIES', 'forms.defaults.,runtime')
    app.config['ENABLE_SITE_TRANSLATIONS'] = os.getenv('ENABLE_SITE_TRANSLATIONS', 'true').lower() in ('true', '1', 'yes')
    app.config['ENABLE_FORM_TRANSLATIONS'] = os.getenv('ENABLE_FORM_TRANSLATIONS', 'true').lower() in ('true', '1', 'yes')
    app.config['FILTER_NON_SOURCE_SCRIPT'] = os.getenv('FILTER_NON_SOURCE_SCRIPT', 'true').lower() in ('true', '1', 'yes')
    app.config['CAPTURE_MISSING_TRANSLATIONS'] = os.getenv('CAPTURE_MISSING_TRANSLATIONS', 'false').lower() in ('true', '1', 'yes')
    app.config['RUNTIME_CATEGORY_PREFIX'] = os.getenv('RUNTIME_CATEGORY_PREFIX', 'runtime')
    app.config['REDIS_URL'] = os.getenv('REDIS_URL')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO').upper()
    app.config['MAX_REPORTED_ERRORS'] = int(os.getenv('MAX_REPORTED_ERRORS', 50))

    if overrides:
        app.config.update(overrides)

    logging.getLogger('translation_manager').setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)

    # Create tables with error handling
    with app.app_context():
        from translation_manager import models  # noqa: F401
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning(f"Could not create database tables: {e}")

    from translation_manager.commands import register_commands
    register_commands(app)

    # Health check
    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}, 200

    return app
