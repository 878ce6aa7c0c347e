"""Loads form definitions stored as JSON files."""
import json
import logging
import os

from translation_manager.exceptions import FormLoadError

logger = logging.getLogger(__name__)


def find_form_files(root: str) -> list:
    if not root or not os.path.isdir(root):
        return []
    return sorted(
        os.path.join(root, name)
        for name in os.listdir(root)
        if name.lower().endswith('.json')
    )


def load_form_file(path: str) -> dict:
    """Read one form definition.

    A file without a ``handle`` takes the file name as handle.

    Raises:
        FormLoadError: if the file cannot be read or is not a JSON object.
    """
    try:
        with open(path, encoding='utf-8') as fh:
            form = json.load(fh)
    except (OSError, ValueError) as e:
        raise FormLoadError(f"Could not load form {path}: {e}", path)

    if not isinstance(form, dict):
        raise FormLoadError(f"Form file {path} does not contain a JSON object", path)

    form.setdefault('handle', os.path.splitext(os.path.basename(path))[0])
    return form


def load_forms(root: str):
    """Load every form in ``root``; returns ``(forms, errors)``."""
    forms = []
    errors = []
    for path in find_form_files(root):
        try:
            forms.append(load_form_file(path))
        except FormLoadError as e:
            logger.warning(str(e))
            errors.append(str(e))
    logger.debug(f"Loaded {len(forms)} forms from {root}")
    return forms, errors
