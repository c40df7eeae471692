"""
Tag parser tests

Tests head grammar, literal braces, closers and both closer policies.
"""

import pytest

from mdfx.lib.errors import InvalidTagSyntax, MismatchedClosingTag, UnclosedTag
from mdfx.lib.parser import TagParser, spans_tokenize
from mdfx.lib.scanner import spans_scan
from mdfx.models.spans import SpanKind
from mdfx.models.tag import ClosingTag, CloserPolicy, ParsedTag, Tag, TagKind


class TestHeads:
    """Test recognition of tag heads"""

    def test_bare_style(self):
        """Bare name is a style tag"""
        token = TagParser("{{mathbold}}x{{/mathbold}}").token_read(0)
        assert isinstance(token, ParsedTag)
        assert token.tag.namespace is None
        assert token.tag.name == "mathbold"
        assert token.tag.kind is TagKind.STYLE
        assert token.head_end == 12
        assert not token.tag.self_closing

    def test_namespaced(self):
        """Reserved namespace followed by ':' is split off"""
        token = TagParser("{{frame:gradient}}").token_read(0)
        assert token.tag.namespace == "frame"
        assert token.tag.name == "gradient"
        assert token.tag.kind is TagKind.FRAME

    def test_self_closing_with_args(self):
        """Positional args and the self-closing suffix"""
        token = TagParser("{{ui:swatch:accent:extra/}}").token_read(0)
        assert token.tag == Tag(
            namespace="ui", name="swatch", args=("accent", "extra"), self_closing=True
        )
        assert token.head_end == len("{{ui:swatch:accent:extra/}}")

    def test_named_params(self):
        """key=value segments become params, values may contain spaces"""
        token = TagParser("{{mathbold:separator= dot }}").token_read(0)
        assert token.tag.params == {"separator": " dot "}
        assert token.tag.args == ()

    def test_mixed_args_and_params(self):
        """Positional and named segments may be mixed"""
        token = TagParser("{{ui:tech:rust:bg=cobalt:logo=white/}}").token_read(0)
        assert token.tag.args == ("rust",)
        assert token.tag.params == {"bg": "cobalt", "logo": "white"}

    def test_unknown_prefix_is_not_namespace(self):
        """Only reserved namespaces are split off; others are positional"""
        token = TagParser("{{foo:bar/}}").token_read(0)
        assert token.tag.namespace is None
        assert token.tag.name == "foo"
        assert token.tag.args == ("bar",)

    def test_namespace_without_colon_is_name(self):
        """A reserved word alone is just a name"""
        token = TagParser("{{frame}}").token_read(0)
        assert token.tag.namespace is None
        assert token.tag.name == "frame"

    def test_name_characters(self):
        """Names use letters, digits, '-' and '_'"""
        token = TagParser("{{sans-serif_bold2}}").token_read(0)
        assert token.tag.name == "sans-serif_bold2"

    def test_empty_value_allowed(self):
        """A parameter may have an empty value"""
        token = TagParser("{{mathbold:separator=}}").token_read(0)
        assert token.tag.params == {"separator": ""}


class TestLiteralBraces:
    """'{{' that cannot start a tag is ordinary text"""

    @pytest.mark.parametrize("text", ["{{ x }}", "{{", "{{}}", "{{/ui", "{{/}}", "{x}", "{{@user}}"])
    def test_not_a_tag(self, text):
        """No name character (or well-formed closer) after '{{' means no tag"""
        assert TagParser(text).token_read(0) is None

    def test_dash_starts_a_head(self):
        """'-' is a name character, so '{{-' commits to a head"""
        with pytest.raises(InvalidTagSyntax):
            TagParser("{{-").token_read(0)


class TestInvalidHeads:
    """Heads that start but do not complete the grammar"""

    @pytest.mark.parametrize(
        "text, reason",
        [
            ("{{mathbold::x}}", "empty argument"),
            ("{{ui:}}", "expected a name"),
            ("{{mathbold x}}", "expected"),
            ("{{mathbold:=x}}", "invalid parameter name"),
            ("{{mathbold:a b=c}}", "invalid parameter name"),
            ("{{mathbold:sep\nx}}", "unterminated"),
            ("{{mathbold:x/y}}", "expected"),
            ("{{mathbold", "expected"),
        ],
    )
    def test_invalid(self, text, reason):
        """Malformed heads raise InvalidTagSyntax at the tag start"""
        with pytest.raises(InvalidTagSyntax) as excinfo:
            TagParser("ab" + text).token_read(2)
        assert reason in str(excinfo.value)
        assert excinfo.value.offset == 2


class TestClosers:
    """Test closer recognition and specific matching"""

    def test_closer_read(self):
        """'{{/name}}' is a closing tag"""
        token = TagParser("x{{/frame}}").token_read(1)
        assert token == ClosingTag(name="frame", start=1, end=11)

    def test_closer_names(self):
        """Namespaced tags close with their namespace, styles with their name"""
        assert Tag(namespace="frame", name="gradient").closer_name == "frame"
        assert Tag(namespace="ui", name="row").closer_name == "ui"
        assert Tag(namespace=None, name="mathbold").closer_name == "mathbold"

    def test_closer_policies(self):
        """Only ui uses the generic policy"""
        assert Tag(namespace="ui", name="row").closer_policy is CloserPolicy.GENERIC
        assert Tag(namespace="frame", name="x").closer_policy is CloserPolicy.SPECIFIC
        assert Tag(namespace=None, name="x").closer_policy is CloserPolicy.SPECIFIC

    def test_self_closing_has_no_body(self):
        """Self-closing tags cannot carry a body range"""
        with pytest.raises(ValueError):
            Tag(namespace="ui", name="x", self_closing=True, body_range=(0, 1))

    def test_specific_first_occurrence(self):
        """The first exact closer terminates the tag"""
        text = "{{mathbold}}a{{mathbold}}b{{/mathbold}}c{{/mathbold}}"
        parser = TagParser(text)
        closer = parser.closer_findSpecific(parser.token_read(0))
        assert closer.start == text.index("{{/mathbold}}")

    def test_specific_unclosed(self):
        """No closer at all is UnclosedTag at the tag offset"""
        parser = TagParser("xx{{mathbold}}abc")
        with pytest.raises(UnclosedTag) as excinfo:
            parser.closer_findSpecific(parser.token_read(2))
        assert excinfo.value.name == "mathbold"
        assert excinfo.value.offset == 2

    def test_specific_mismatched(self):
        """A different closer is MismatchedClosingTag"""
        parser = TagParser("{{mathbold}}X{{/script}}")
        with pytest.raises(MismatchedClosingTag) as excinfo:
            parser.closer_findSpecific(parser.token_read(0))
        assert excinfo.value.expected == "mathbold"
        assert excinfo.value.found == "script"

    def test_specific_respects_limit(self):
        """Closers past the region limit are not seen"""
        text = "{{mathbold}}a`{{/mathbold}}`"
        parser = TagParser(text)
        with pytest.raises(UnclosedTag):
            parser.closer_findSpecific(parser.token_read(0), limit=13)


class TestGenericMatching:
    """Test the open-tag stack for {{/ui}}"""

    def test_nested_lifo(self):
        """The first {{/ui}} closes the innermost ui tag"""
        text = "{{ui:a}}{{ui:b}}INNER{{/ui}}OUTER{{/ui}}"
        parser = TagParser(text)
        outer = parser.extent_matchGeneric(parser.token_read(0))
        assert outer.start == len(text) - len("{{/ui}}")
        inner = parser.extent_matchGeneric(parser.token_read(8))
        assert text[inner.start : inner.end] == "{{/ui}}"
        assert text[16 : inner.start] == "INNER"

    def test_self_closing_not_pushed(self):
        """Self-closing ui tags do not need a closer"""
        text = "{{ui:row}}{{ui:swatch:accent/}}{{/ui}}"
        parser = TagParser(text)
        closer = parser.extent_matchGeneric(parser.token_read(0))
        assert closer.end == len(text)

    def test_specific_bodies_skipped(self):
        """A {{/ui}} inside a frame body belongs to a ui tag inside that frame"""
        text = "{{ui:a}}{{frame:star}}{{ui:b}}x{{/ui}}{{/frame}}y{{/ui}}"
        parser = TagParser(text)
        closer = parser.extent_matchGeneric(parser.token_read(0))
        assert closer.end == len(text)

    def test_generic_unclosed(self):
        """Missing {{/ui}} is UnclosedTag"""
        parser = TagParser("{{ui:a}}{{ui:b}}x{{/ui}}")
        with pytest.raises(UnclosedTag) as excinfo:
            parser.extent_matchGeneric(parser.token_read(0))
        assert excinfo.value.name == "ui"


class TestTokenize:
    """Test the tooling span view"""

    def test_tag_spans(self):
        """Heads and closers become TAG spans, code stays code"""
        source = "a {{mathbold}}b{{/mathbold}} `{{x}}`"
        spans = spans_tokenize(source, spans_scan(source))
        assert [(s.kind, s.text_get(source)) for s in spans] == [
            (SpanKind.LITERAL, "a "),
            (SpanKind.TAG, "{{mathbold}}"),
            (SpanKind.LITERAL, "b"),
            (SpanKind.TAG, "{{/mathbold}}"),
            (SpanKind.LITERAL, " "),
            (SpanKind.CODE, "`{{x}}`"),
        ]

    def test_malformed_head_is_literal(self):
        """Tokenizing never raises"""
        source = "{{mathbold x}}"
        spans = spans_tokenize(source, spans_scan(source))
        assert [s.kind for s in spans] == [SpanKind.LITERAL]
