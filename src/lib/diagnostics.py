"""
Error diagnostics

Formats an MdfxError against the source it came from:

    unclosed tag 'mathbold'
    Line 3, column 5
    Context: ...intro {{mathbold}}Title and more text...
                      ^
"""

from typing import Tuple

from pygments import highlight
from pygments.formatters import TerminalFormatter

from .errors import MdfxError
from .lexer import MdfxLexer


CONTEXT_RADIUS = 40


def position_locate(source: str, offset: int) -> Tuple[int, int]:
    """
    1-based line and column of ``offset``.

    Example:
        >>> position_locate("ab\\ncd", 4)
        (2, 2)
    """
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def context_extract(source: str, offset: int, radius: int = CONTEXT_RADIUS) -> Tuple[str, int]:
    """
    Text around ``offset`` on its own line, and the caret column within it.

    The window is at most ``radius`` characters either side and never
    crosses a line break.
    """
    line_start = source.rfind("\n", 0, offset) + 1
    line_end = source.find("\n", offset)
    if line_end == -1:
        line_end = len(source)
    start = max(line_start, offset - radius)
    end = min(line_end, offset + radius)
    return source[start:end], offset - start


def error_format(source: str, error: MdfxError, color: bool = False) -> str:
    """
    Render ``error`` with line, column, context and a caret.

    Args:
        source: The text that was processed
        error: The error raised while processing it
        color: Highlight the context line with the mdfx Pygments lexer

    Returns:
        Multi-line diagnostic text
    """
    if error.offset is None:
        return error.message

    line, column = position_locate(source, error.offset)
    context, caret = context_extract(source, error.offset)
    prefix = "Context: ..."
    shown = context
    if color:
        shown = highlight(context, MdfxLexer(), TerminalFormatter()).rstrip("\n")
    return (
        f"{error.message}\n"
        f"Line {line}, column {column}\n"
        f"{prefix}{shown}...\n"
        f"{' ' * (len(prefix) + caret)}^"
    )
