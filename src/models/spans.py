"""
Source span models

The scanner partitions a document into an ordered, gap-free sequence of
spans. Concatenating the text of every span reproduces the input exactly.
"""

from dataclasses import dataclass
from enum import Enum


class SpanKind(Enum):
    """Classification of a region of source text"""

    LITERAL = "literal"  # tag syntax is recognized here
    CODE = "code"  # fenced or inline code, passed through untouched
    TAG = "tag"  # tag head or closer (tooling view only)


@dataclass(frozen=True)
class SourceSpan:
    """
    A half-open ``[start, end)`` region of the source string.

    Attributes:
        kind: What the region holds
        start: Offset of the first character
        end: Offset one past the last character

    Example:
        For source "a `b` c":
        [SourceSpan(LITERAL, 0, 2), SourceSpan(CODE, 2, 5), SourceSpan(LITERAL, 5, 7)]
    """

    kind: SpanKind
    start: int
    end: int

    def text_get(self, source: str) -> str:
        """Return the slice of ``source`` covered by this span"""
        return source[self.start : self.end]

    def __len__(self) -> int:
        return self.end - self.start
