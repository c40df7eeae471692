"""
Code-span scanner

Splits raw input into literal and code spans so that tag syntax inside
fenced blocks and inline code is never interpreted.

Policy:
    - Input is processed line by line; line endings stay attached to
      their line so that offsets and bytes are preserved exactly.
    - A line whose stripped text starts with a fence marker opens a fenced
      block; the block closes on the next line starting with the same
      marker. Both fence lines belong to the code span. An unterminated
      fence runs to the end of the input.
    - Outside fences, inline-code delimiters pair left to right within a
      line. An unpaired trailing delimiter is literal text, and the text
      after it stays available to the tag parser.
    - Adjacent spans of the same kind are merged, so a tag may span lines
      but never a code span.
"""

from typing import Iterator, List, Optional, Sequence, Tuple

from ..models.spans import SourceSpan, SpanKind


DEFAULT_FENCE_MARKERS = ("```", "~~~")
DEFAULT_INLINE_DELIMITER = "`"


def lines_split(source: str) -> Iterator[Tuple[int, str]]:
    """
    Yield ``(offset, line)`` pairs, keeping each line's trailing newline.

    Example:
        >>> list(lines_split("a\\nb"))
        [(0, 'a\\n'), (2, 'b')]
    """
    offset = 0
    while offset < len(source):
        newline = source.find("\n", offset)
        end = len(source) if newline == -1 else newline + 1
        yield offset, source[offset:end]
        offset = end


def fence_marker(line: str, markers: Sequence[str]) -> Optional[str]:
    """Return the fence marker a line starts with, or None"""
    stripped = line.strip()
    for marker in markers:
        if stripped.startswith(marker):
            return marker
    return None


def span_append(spans: List[SourceSpan], kind: SpanKind, start: int, end: int) -> None:
    """Append a span, merging it into the previous span of the same kind"""
    if start >= end:
        return
    if spans and spans[-1].kind is kind and spans[-1].end == start:
        spans[-1] = SourceSpan(kind, spans[-1].start, end)
    else:
        spans.append(SourceSpan(kind, start, end))


def inline_split(
    line: str, offset: int, delimiter: str, spans: List[SourceSpan]
) -> None:
    """
    Split one non-fenced line into literal and inline-code spans.

    Args:
        line: Line text (with its newline, if any)
        offset: Offset of the line in the source
        delimiter: Inline code delimiter
        spans: Output list, appended to in place
    """
    positions = []
    search = 0
    while True:
        found = line.find(delimiter, search)
        if found == -1:
            break
        positions.append(found)
        search = found + len(delimiter)

    cursor = 0
    for opening, closing in zip(positions[0::2], positions[1::2]):
        span_append(spans, SpanKind.LITERAL, offset + cursor, offset + opening)
        cursor = closing + len(delimiter)
        span_append(spans, SpanKind.CODE, offset + opening, offset + cursor)
    span_append(spans, SpanKind.LITERAL, offset + cursor, offset + len(line))


def spans_scan(
    source: str,
    fence_markers: Sequence[str] = DEFAULT_FENCE_MARKERS,
    inline_delimiter: str = DEFAULT_INLINE_DELIMITER,
) -> List[SourceSpan]:
    """
    Partition ``source`` into literal and code spans.

    Never fails; the spans cover the input without gaps or overlap.

    Args:
        source: Document text
        fence_markers: Line prefixes opening/closing fenced blocks
        inline_delimiter: Inline code delimiter

    Returns:
        Ordered list of spans

    Example:
        spans_scan("x `{{a}}` y")
        → LITERAL [0, 2), CODE [2, 9), LITERAL [9, 11)
    """
    spans: List[SourceSpan] = []
    open_fence: Optional[str] = None

    for offset, line in lines_split(source):
        end = offset + len(line)
        if open_fence is not None:
            span_append(spans, SpanKind.CODE, offset, end)
            if line.strip().startswith(open_fence):
                open_fence = None
            continue

        marker = fence_marker(line, fence_markers)
        if marker is not None:
            open_fence = marker
            span_append(spans, SpanKind.CODE, offset, end)
            continue

        inline_split(line, offset, inline_delimiter, spans)

    return spans
