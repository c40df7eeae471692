"""
Custom Pygments lexer for mdfx template syntax highlighting

Used to highlight source context in diagnostics and registered as the
``mdfx`` lexer for other Pygments consumers.

Token types:
- Keyword.Namespace: Reserved namespaces (ui, frame, badge, shields, partial)
- Name.Tag: Tag names (e.g. gradient, mathbold)
- Name.Attribute / Literal.String: key=value parameters
- Literal: Positional arguments
- Punctuation: Delimiters {{ }} /}} and ':' separators
- String.Backtick: Inline and fenced code (never interpreted)
"""

import re

from pygments.lexer import RegexLexer, bygroups, default
from pygments.token import (
    Keyword,
    Literal,
    Name,
    Punctuation,
    String,
    Text,
)


class MdfxLexer(RegexLexer):
    """
    Lexer for mdfx template markup

    Example:
        {{frame:gradient}}{{mathbold:separator=dot}}Title{{/mathbold}}{{/frame}}

    Tokens:
        {{ → Punctuation
        frame → Keyword.Namespace
        gradient → Name.Tag
        separator → Name.Attribute
        dot → Literal.String
    """

    name = 'mdfx'
    aliases = ['mdfx']
    filenames = ['*.mdfx', '*.mdfx.md']

    tokens = {
        'root': [
            # Fenced code blocks pass through untouched
            (r'^(```|~~~)[^\n]*\n(.*?\n)?\1[^\n]*$', String.Backtick),

            # Inline code
            (r'`[^`\n]*`', String.Backtick),

            # Closers: {{/ui}}, {{/frame}}, {{/mathbold}}
            (r'(\{\{/)((?:ui|frame|badge|shields|partial)\b)(\}\})',
             bygroups(Punctuation, Keyword.Namespace, Punctuation)),
            (r'(\{\{/)([A-Za-z0-9_-]+)(\}\})',
             bygroups(Punctuation, Name.Tag, Punctuation)),

            # Namespaced head
            (r'(\{\{)(ui|frame|badge|shields|partial)(:)([A-Za-z0-9_-]+)',
             bygroups(Punctuation, Keyword.Namespace, Punctuation, Name.Tag), 'head'),

            # Bare style head
            (r'(\{\{)([A-Za-z0-9_-]+)', bygroups(Punctuation, Name.Tag), 'head'),

            # Everything else is text
            (r'[^{`]+', Text),
            (r'.', Text),
            (r'\n', Text),
        ],

        'head': [
            (r'/\}\}', Punctuation, '#pop'),
            (r'\}\}', Punctuation, '#pop'),

            # key=value parameters
            (r'(:)([A-Za-z0-9_-]+)(=)([^:/}]*)',
             bygroups(Punctuation, Name.Attribute, Punctuation, Literal.String)),

            # Positional arguments
            (r'(:)([^:/}=]+)', bygroups(Punctuation, Literal)),

            # Malformed head: give up on it
            default('#pop'),
        ],
    }

    flags = re.MULTILINE | re.DOTALL


def get_lexer() -> MdfxLexer:
    """
    Get the MdfxLexer instance

    Returns:
        MdfxLexer instance ready for use with Pygments
    """
    return MdfxLexer()
