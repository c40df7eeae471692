"""
Tag parser for mdfx template syntax

Recognizes a single ``{{...}}`` unit at a position and, for
specific-closer tags, locates its closer.

Grammar:
    open     := "{{" head segment* ( "}}" | "/}}" )
    head     := [namespace ":"] name
    segment  := ":" ( key "=" value | value )
    closer   := "{{/" name "}}"
    name     := [A-Za-z0-9_-]+
    value    := any characters except ":", "/", "}"

A ``{{`` that is not followed by a name character or by a well-formed
closer is ordinary text. Once a head has started, anything that does not
complete the grammar is an InvalidTagSyntax error.

The scan is single pass and never backtracks: heads are read greedily and
closers are found by forward search.
"""

import re
import string
from typing import Dict, List, Optional, Tuple, Union

from ..models.spans import SourceSpan, SpanKind
from ..models.tag import (
    NAMESPACES,
    ClosingTag,
    CloserPolicy,
    OpenTagEntry,
    ParsedTag,
    Tag,
)
from .errors import InvalidTagSyntax, MismatchedClosingTag, UnclosedTag


OPEN = "{{"
CLOSE = "}}"
SELF_CLOSE = "/}}"
NAME_CHARS = frozenset(string.ascii_letters + string.digits + "-_")
VALUE_STOP = frozenset(":/}")

_closer_pattern = re.compile(r"\{\{/([A-Za-z0-9_-]+)\}\}")

Token = Union[ParsedTag, ClosingTag]


class TagParser:
    """
    Parser over one piece of text.

    Offsets accepted and returned are indices into ``text``.

    Example:
        >>> parser = TagParser("{{mathbold:separator=dot}}AB{{/mathbold}}")
        >>> token = parser.token_read(0)
        >>> token.tag.name, token.tag.params
        ('mathbold', {'separator': 'dot'})
        >>> parser.closer_findSpecific(token, limit=41).start
        28
    """

    def __init__(self, text: str):
        self.text = text

    # Token recognition -----------------------------------------------------

    def token_read(self, pos: int, limit: Optional[int] = None) -> Optional[Token]:
        """
        Read the tag or closer starting at ``pos``.

        Args:
            pos: Offset of a ``{{``
            limit: Offset the token may not extend past (defaults to the end)

        Returns:
            ParsedTag for an opening or self-closing tag, ClosingTag for a
            closer, None if the ``{{`` is ordinary text

        Raises:
            InvalidTagSyntax: If a head starts but is malformed
        """
        end = len(self.text) if limit is None else limit
        if not self.text.startswith(OPEN, pos, end):
            return None
        first = pos + len(OPEN)
        if first < end and self.text[first] == "/":
            return self.closer_read(pos, end)
        if first >= end or self.text[first] not in NAME_CHARS:
            return None
        return self.head_parse(pos, end)

    def closer_read(self, pos: int, limit: Optional[int] = None) -> Optional[ClosingTag]:
        """Read a ``{{/name}}`` closer at ``pos`` or return None"""
        end = len(self.text) if limit is None else limit
        match = _closer_pattern.match(self.text, pos, end)
        if match is None:
            return None
        return ClosingTag(name=match.group(1), start=pos, end=match.end())

    def name_read(self, pos: int, limit: int) -> Tuple[str, int]:
        """Consume name characters from ``pos``; return the name and new offset"""
        cursor = pos
        while cursor < limit and self.text[cursor] in NAME_CHARS:
            cursor += 1
        return self.text[pos:cursor], cursor

    def head_parse(self, pos: int, limit: int) -> ParsedTag:
        """
        Parse an opening or self-closing tag head at ``pos``.

        Raises:
            InvalidTagSyntax: On an empty segment, an empty parameter name,
                              an unterminated head, or a missing ``}}``
        """
        cursor = pos + len(OPEN)
        name, cursor = self.name_read(cursor, limit)

        namespace: Optional[str] = None
        if name in NAMESPACES and self.text.startswith(":", cursor, limit):
            namespace = name
            name, cursor = self.name_read(cursor + 1, limit)
            if not name:
                raise InvalidTagSyntax(f"expected a name after '{namespace}:'", pos)

        args: List[str] = []
        params: Dict[str, str] = {}
        while self.text.startswith(":", cursor, limit):
            cursor += 1
            start = cursor
            while cursor < limit and self.text[cursor] not in VALUE_STOP:
                if self.text[cursor] in "{\n":
                    raise InvalidTagSyntax("unterminated tag head", pos)
                cursor += 1
            segment = self.text[start:cursor]
            if not segment:
                raise InvalidTagSyntax(f"empty argument in '{name}'", pos)
            key, sep, value = segment.partition("=")
            if not sep:
                args.append(segment)
                continue
            if not key or any(ch not in NAME_CHARS for ch in key):
                raise InvalidTagSyntax(f"invalid parameter name {key!r} in '{name}'", pos)
            params[key] = value

        if self.text.startswith(SELF_CLOSE, cursor, limit):
            self_closing = True
            head_end = cursor + len(SELF_CLOSE)
        elif self.text.startswith(CLOSE, cursor, limit):
            self_closing = False
            head_end = cursor + len(CLOSE)
        else:
            raise InvalidTagSyntax(f"expected '}}}}' or '/}}}}' to end '{name}'", pos)

        tag = Tag(
            namespace=namespace,
            name=name,
            args=tuple(args),
            params=params,
            self_closing=self_closing,
        )
        return ParsedTag(tag=tag, start=pos, head_end=head_end, end=head_end)

    # Closer matching -------------------------------------------------------

    def closer_findSpecific(self, parsed: ParsedTag, limit: Optional[int] = None) -> ClosingTag:
        """
        Find the closer of a specific-closer tag.

        The first exact ``{{/closer_name}}`` after the head terminates the
        tag; same-name nesting is not supported.

        Args:
            parsed: Opening tag
            limit: End of the searchable region

        Returns:
            The matching closer

        Raises:
            MismatchedClosingTag: No exact closer, but another closer follows
            UnclosedTag: No closer at all
        """
        end = len(self.text) if limit is None else limit
        expected = parsed.tag.closer_name
        target = f"{{{{/{expected}}}}}"
        found = self.text.find(target, parsed.head_end, end)
        if found != -1:
            return ClosingTag(name=expected, start=found, end=found + len(target))

        other = _closer_pattern.search(self.text, parsed.head_end, end)
        if other is not None:
            raise MismatchedClosingTag(expected, other.group(1), parsed.start)
        raise UnclosedTag(expected, parsed.start)

    def extent_matchGeneric(self, parsed: ParsedTag, limit: Optional[int] = None) -> ClosingTag:
        """
        Find the closer of a generic-closer tag with an open-tag stack.

        Every generic opener of the same namespace met on the way pushes an
        entry; every generic closer pops the most recent one. The closer
        that empties the stack belongs to ``parsed``. Specific-closer tags
        met on the way are skipped whole, so closers inside their bodies
        are not counted.

        Example:
            "{{ui:a}}{{ui:b}}INNER{{/ui}}OUTER{{/ui}}"
            ui:a is closed by the second {{/ui}}.

        Raises:
            UnclosedTag: If the stack never empties within the region
        """
        end = len(self.text) if limit is None else limit
        closer = parsed.tag.closer_name
        stack = [OpenTagEntry(CloserPolicy.GENERIC, closer, parsed.start)]
        cursor = parsed.head_end
        while True:
            found = self.text.find(OPEN, cursor, end)
            if found == -1:
                raise UnclosedTag(closer, parsed.start)
            token = self.token_read(found, end)
            if token is None:
                cursor = found + 1
                continue
            if isinstance(token, ClosingTag):
                if token.name == closer:
                    stack.pop()
                    if not stack:
                        return token
                cursor = token.end
                continue
            tag = token.tag
            if tag.self_closing:
                cursor = token.head_end
            elif tag.closer_policy is CloserPolicy.GENERIC and tag.closer_name == closer:
                stack.append(OpenTagEntry(CloserPolicy.GENERIC, closer, token.start))
                cursor = token.head_end
            elif tag.closer_policy is CloserPolicy.SPECIFIC:
                cursor = self.closer_findSpecific(token, end).end
            else:
                cursor = token.head_end


def spans_tokenize(source: str, spans: List[SourceSpan]) -> List[SourceSpan]:
    """
    Refine scanner spans by splitting tag heads and closers out of literal
    spans.

    Malformed heads are left as literal text; this view is for tooling
    (highlighting, editors) and never raises.
    """
    refined: List[SourceSpan] = []
    for span in spans:
        if span.kind is not SpanKind.LITERAL:
            refined.append(span)
            continue
        parser = TagParser(source)
        literal_start = span.start
        cursor = span.start
        while True:
            found = source.find(OPEN, cursor, span.end)
            if found == -1:
                break
            try:
                token = parser.token_read(found, span.end)
            except InvalidTagSyntax:
                token = None
            if token is None:
                cursor = found + 1
                continue
            token_end = token.end if isinstance(token, ClosingTag) else token.head_end
            if found > literal_start:
                refined.append(SourceSpan(SpanKind.LITERAL, literal_start, found))
            refined.append(SourceSpan(SpanKind.TAG, found, token_end))
            literal_start = cursor = token_end
        if literal_start < span.end:
            refined.append(SourceSpan(SpanKind.LITERAL, literal_start, span.end))
    return refined
