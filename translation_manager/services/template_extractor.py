"""Template scanning for translation discovery.

Walks the Jinja2 syntax tree of a template instead of matching raw text, so
string literals are told apart from code, comments and half-matched
delimiters. Every ``'Text'|t`` / ``'Text'|t('category')`` call whose subject
resolves statically is reported.

Resolution rules:
- A literal subject is used directly.
- A name subject is looked up among ``{% set name = 'literal' %}`` (and
  ``{% with %}``) bindings visible in the current scope. Names bound to
  anything computed resolve to nothing and the call is skipped.
- The category is the first positional argument or the ``category``
  keyword when it is a non-empty literal. A dynamic category expression
  falls back to the default category.
"""
import logging
import os
from collections import ChainMap

from jinja2 import Environment, nodes

from translation_manager.exceptions import TemplateCodeRejected
from translation_manager.services.extracted import ExtractedString
from translation_manager.services.text_filters import contains_template_code, resolve_captured_text

logger = logging.getLogger(__name__)

DEFAULT_FILTER_NAMES = ('t', 'translate')
DEFAULT_EXTENSIONS = ('jinja2.ext.i18n', 'jinja2.ext.do', 'jinja2.ext.loopcontrols')

# Marks a name bound to a computed value in the current scope
_DYNAMIC = object()

# Nodes whose assignments do not leak into the enclosing scope
_SCOPING_NODES = (nodes.For, nodes.Macro, nodes.CallBlock, nodes.Block, nodes.Scope, nodes.With, nodes.FilterBlock)


def build_environment(extensions=DEFAULT_EXTENSIONS) -> Environment:
    """Environment used only for parsing; templates are never rendered."""
    return Environment(extensions=list(extensions), autoescape=False)


class TemplateExtractor:
    """Extract translatable literals from template sources."""

    def __init__(self, default_category: str, filter_names=DEFAULT_FILTER_NAMES, env: Environment = None):
        self.default_category = default_category
        self.filter_names = frozenset(filter_names)
        self.env = env or build_environment()

    def extract(self, source: str, origin: str = '<template>'):
        """Yield an ExtractedString per translation call in ``source``.

        Lazy and restartable: each call parses the source again.

        Raises:
            jinja2.TemplateSyntaxError: when the template cannot be parsed.
        """
        tree = self.env.parse(source, name=origin)
        yield from self._walk(tree, ChainMap(), origin)

    def extract_file(self, path: str, origin: str = None):
        """Read a template file and yield its extracted strings."""
        with open(path, encoding='utf-8') as fh:
            source = fh.read()
        yield from self.extract(source, origin or os.path.basename(path))

    def _walk(self, node, scope, origin):
        if isinstance(node, _SCOPING_NODES):
            scope = scope.new_child()
            self._bind_scope_names(node, scope)

        if isinstance(node, nodes.Assign):
            self._track_assignment(node, scope)
        elif isinstance(node, nodes.AssignBlock):
            for name in _target_names(node.target):
                scope[name] = _DYNAMIC

        if isinstance(node, nodes.Filter) and node.name in self.filter_names:
            yield from self._extract_call(node, scope, origin)

        # Siblings and children are always visited, matched or not
        for child in node.iter_child_nodes():
            yield from self._walk(child, scope, origin)

    def _bind_scope_names(self, node, scope):
        if isinstance(node, nodes.For):
            for name in _target_names(node.target):
                scope[name] = _DYNAMIC
        elif isinstance(node, (nodes.Macro, nodes.CallBlock)):
            for arg in node.args:
                scope[arg.name] = _DYNAMIC
        elif isinstance(node, nodes.With):
            for target, value in zip(node.targets, node.values):
                self._bind(target, value, scope)

    def _track_assignment(self, node, scope):
        """Track ``{% set name = 'literal' %}``; computed values hide earlier bindings."""
        self._bind(node.target, node.node, scope)

    def _bind(self, target, value, scope):
        if isinstance(target, nodes.Name) and isinstance(value, nodes.Const) and isinstance(value.value, str):
            scope[target.name] = value.value
            return
        for name in _target_names(target):
            scope[name] = _DYNAMIC

    def _extract_call(self, node, scope, origin):
        text = self._resolve_subject(node.node, scope)
        if not text:
            logger.debug(f"{origin}: translation call with unresolved subject skipped")
            return

        category = self._resolve_category(node)

        if contains_template_code(text):
            try:
                spans = resolve_captured_text(text)
            except TemplateCodeRejected as e:
                logger.warning(f"{origin}: dropped literal with template code ({e.reason}): {text[:50]!r}")
                return
            for span in spans:
                yield ExtractedString(span, category, origin)
            return

        yield ExtractedString(text, category, origin)

    @staticmethod
    def _resolve_subject(node, scope):
        if isinstance(node, nodes.Const):
            return node.value if isinstance(node.value, str) else None
        if isinstance(node, nodes.Name):
            value = scope.get(node.name)
            return value if isinstance(value, str) else None
        return None

    def _resolve_category(self, node) -> str:
        if node.args:
            arg = node.args[0]
            if not isinstance(arg, nodes.Const):
                return self.default_category
            if isinstance(arg.value, str) and arg.value:
                return arg.value

        for keyword in node.kwargs:
            if keyword.key != 'category':
                continue
            value = keyword.value
            if isinstance(value, nodes.Const) and isinstance(value.value, str) and value.value:
                return value.value
            return self.default_category

        return self.default_category


def _target_names(target) -> list:
    if isinstance(target, nodes.Name):
        return [target.name]
    if isinstance(target, nodes.Tuple):
        names = []
        for item in target.items:
            names.extend(_target_names(item))
        return names
    return []


def find_template_files(root: str, extensions) -> list:
    """All template files under ``root`` with a matching extension, sorted."""
    if not root or not os.path.isdir(root):
        return []

    extensions = tuple(ext.lower() for ext in extensions)
    found = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            if filename.lower().endswith(extensions):
                found.append(os.path.join(dirpath, filename))
    return sorted(found)


def relative_template_path(path: str, root: str) -> str:
    """Path relative to the templates root, with forward slashes."""
    try:
        relative = os.path.relpath(path, root)
    except ValueError:
        return os.path.basename(path)
    if relative.startswith('..'):
        return os.path.basename(path)
    return relative.replace(os.sep, '/')
