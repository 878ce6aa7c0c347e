"""Token-stream validation for captured literals that contain template syntax.

A literal such as ``"{% x:button %}Send{% endx %}"`` is unrendered template
source. The only form accepted is a sequence of component blocks
(``{% block %}`` or the namespaced ``{% x:name %}``) whose body is plain
data; the enclosed text of each block is returned. Anything else
(expressions, comments, control tags such as ``if`` or ``for``, nested tags,
unbalanced tags) is rejected.

The check runs over ``Environment.lex`` output and never compiles or
renders the input.
"""
from jinja2 import Environment, TemplateSyntaxError

from translation_manager.exceptions import TemplateCodeRejected

_lexer_env = Environment()

# Tag names that open a component block; ``x`` covers ``{% x:name %}``
COMPONENT_TAGS = ('block', 'x')

# Tokens allowed between a tag name and the closing delimiter
_TAG_ARGUMENT_TOKENS = {'whitespace', 'name', 'operator', 'string', 'integer', 'float'}

OUTSIDE = 'outside'
OPEN_TAG_NAME = 'open_tag_name'
OPEN_TAG_ARGS = 'open_tag_args'
BODY = 'body'
CLOSE_TAG_NAME = 'close_tag_name'
CLOSE_TAG_END = 'close_tag_end'


def extract_block_bodies(text: str, env: Environment = None, component_tags=COMPONENT_TAGS) -> list:
    """Return the raw body of every component block in ``text``.

    Raises:
        TemplateCodeRejected: if the token stream contains anything other
            than component blocks with a plain-data body and surrounding data.
    """
    env = env or _lexer_env
    state = OUTSIDE
    tag = None
    body = []
    bodies = []

    try:
        for _lineno, token_type, value in env.lex(text):
            if state == OUTSIDE:
                if token_type == 'data':
                    continue
                if token_type == 'block_begin':
                    state = OPEN_TAG_NAME
                    continue
                raise TemplateCodeRejected(f'{token_type} outside a component block', text)

            if state == OPEN_TAG_NAME:
                if token_type == 'whitespace':
                    continue
                if token_type == 'name' and value in component_tags:
                    tag = value
                    state = OPEN_TAG_ARGS
                    continue
                if token_type == 'name':
                    raise TemplateCodeRejected(f'{value!r} is not a component block', text)
                raise TemplateCodeRejected(f'unexpected {token_type} {value!r} opening a block', text)

            if state == OPEN_TAG_ARGS:
                if token_type in _TAG_ARGUMENT_TOKENS:
                    continue
                if token_type == 'block_end':
                    body = []
                    state = BODY
                    continue
                raise TemplateCodeRejected(f'{token_type} inside block tag {tag!r}', text)

            if state == BODY:
                if token_type == 'data':
                    body.append(value)
                    continue
                if token_type == 'block_begin':
                    state = CLOSE_TAG_NAME
                    continue
                raise TemplateCodeRejected(f'{token_type} inside block {tag!r}', text)

            if state == CLOSE_TAG_NAME:
                if token_type == 'whitespace':
                    continue
                if token_type == 'name' and value == f'end{tag}':
                    state = CLOSE_TAG_END
                    continue
                raise TemplateCodeRejected(f'nested tag {value!r} inside block {tag!r}', text)

            if state == CLOSE_TAG_END:
                if token_type == 'whitespace':
                    continue
                if token_type == 'block_end':
                    bodies.append(''.join(body))
                    tag = None
                    state = OUTSIDE
                    continue
                raise TemplateCodeRejected(f'arguments on end tag of {tag!r}', text)
    except TemplateSyntaxError as e:
        raise TemplateCodeRejected(f'unparsable template syntax: {e.message}', text)

    if state != OUTSIDE:
        raise TemplateCodeRejected(f'unterminated block {tag!r}', text)
    if not bodies:
        raise TemplateCodeRejected('no component block found', text)
    return bodies
