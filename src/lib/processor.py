"""
Template processor

Walks a document, recognizes tags in literal spans and expands them:

    ui:*        components (generic {{/ui}} closer, open-tag stack)
    frame:*     prefix + processed content + suffix
    badge:*     single-character enclosure
    shields:*   primitives rendered by the configured backend
    <style>     Unicode character styles with separator/spacing
    partial:*   user templates from the project configuration

Nested expansion runs on an explicit work-list of jobs rather than host
recursion, so the depth cap is exact and independent of the call stack.
The first error anywhere aborts the whole call; no partial output is
ever returned.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config.settings import AppSettings, appsettings
from ..models.assets import FileAsset
from ..models.context import EvalContext
from ..models.primitive import Divider, Primitive, Swatch, Tech, TwoTone
from ..models.renderables import RenderableKind
from ..models.spans import SourceSpan, SpanKind
from ..models.tag import NAMESPACES, ClosingTag, CloserPolicy, ParsedTag, Tag, TagKind
from .components import ComponentExpander, PrimitiveOutput, postProcess_apply
from .errors import (
    BackendError,
    ExpansionLimitExceeded,
    InvalidParameterValue,
    InvalidTagSyntax,
    MdfxError,
    MismatchedClosingTag,
    UnknownBadge,
    UnknownFrame,
    UnknownNamespace,
    UnknownPartial,
    UnknownPrimitive,
    UnknownStyle,
    UnsupportedChar,
)
from .converter import convert, convert_with_separator, convert_with_spacing
from .log import LOG
from .palette import Palette
from .parser import OPEN, TagParser, spans_tokenize
from .registry import Registry, suggestions_find
from .renderers import Renderer, renderer_create
from .scanner import spans_scan


SHIELDS_TYPES = ("block", "twotone", "bar", "icon")
STYLE_PARAMS = ("separator", "spacing")

Finisher = Callable[[str], str]

# (start, end, source_start): text[start:end] was copied from the source
# beginning at source_start
Segment = Tuple[int, int, int]


def segments_slice(
    segments: Sequence[Segment], start: int, end: int, shift: int
) -> List[Segment]:
    """
    The part of ``segments`` covering ``[start, end)``, moved by ``shift``.

    Used when a slice of one job's text reappears in a child job: a frame
    body keeps its position (shift = -start), a component's ``$content``
    lands wherever the template placed it.

    Example:
        >>> segments_slice([(0, 50, 100)], 10, 20, 5)
        [(15, 25, 110)]
    """
    sliced: List[Segment] = []
    for seg_start, seg_end, source_start in segments:
        low, high = max(seg_start, start), min(seg_end, end)
        if low < high:
            sliced.append((low + shift, high + shift, source_start + low - seg_start))
    return sliced


@dataclass
class _Job:
    """
    One piece of text being expanded.

    Attributes:
        text: Text to expand
        depth: Nesting depth (0 for document text)
        segments: Parts of ``text`` copied verbatim from the source
        origin: Source offset of the tag that produced this job
        context: Evaluation context of the text
        finish: Applied to the expanded text before it is handed back
        pos: Scan cursor into ``text``
        parts: Output collected so far
    """

    text: str
    depth: int
    segments: List[Segment]
    origin: int
    context: EvalContext
    finish: Optional[Finisher] = None
    pos: int = 0
    parts: List[str] = field(default_factory=list)
    parser: TagParser = field(init=False)

    def __post_init__(self) -> None:
        self.parser = TagParser(self.text)

    def offset_map(self, local: int) -> int:
        """
        Translate an offset in ``text`` to an offset in the source.

        Offsets in synthetic text (template pieces) map to the offset of
        the tag that produced this job.
        """
        for seg_start, seg_end, source_start in self.segments:
            if seg_start <= local < seg_end:
                return source_start + local - seg_start
        return self.origin


@dataclass
class _Run:
    """Per-call bookkeeping"""

    assets: List[FileAsset] = field(default_factory=list)
    asset_paths: set = field(default_factory=set)
    expansions: int = 0


class Processor:
    """
    Expands mdfx templates in text.

    Args:
        registry: Renderable definitions (built-in tables by default)
        renderer: Backend for primitives (from settings by default)
        settings: Limits and defaults (the ``appsettings`` singleton by default)
        context: Evaluation context of document text (from settings by default)

    Example:
        >>> processor = Processor()
        >>> processor.process("{{mathbold:separator=dot}}AB{{/mathbold}}")
        '𝐀·𝐁'
    """

    def __init__(
        self,
        registry: Optional[Registry] = None,
        renderer: Optional[Renderer] = None,
        settings: Optional[AppSettings] = None,
        context: Optional[EvalContext] = None,
    ):
        self.settings = settings if settings is not None else appsettings
        self.registry = registry if registry is not None else Registry.builtin()
        self.renderer = (
            renderer
            if renderer is not None
            else renderer_create(self.settings.default_backend, self.settings.assets_dir)
        )
        self.context = context if context is not None else self.settings.context_default()
        self.palette = Palette(self.registry.palette)
        self.expander = ComponentExpander(self.registry, self.palette)

    # Public API ------------------------------------------------------------

    def process(self, source: str) -> str:
        """Expand every tag in ``source`` and return the output text"""
        output, _ = self.process_with_assets(source)
        return output

    def process_with_assets(self, source: str) -> Tuple[str, List[FileAsset]]:
        """
        Expand every tag and collect file assets produced by the renderer.

        Code spans are copied through byte for byte; only literal spans are
        expanded.

        Returns:
            ``(output, assets)`` with assets in order of first appearance

        Raises:
            MdfxError: The first failure, with the offending tag's offset
        """
        run = _Run()
        output: List[str] = []
        spans = spans_scan(
            source, self.settings.fence_markers, self.settings.inline_code_delimiter
        )
        LOG(f"Scanned {len(source)} chars into {len(spans)} spans", level=3)
        for span in spans:
            text = span.text_get(source)
            if span.kind is SpanKind.CODE or OPEN not in text:
                output.append(text)
                continue
            output.append(self.text_expand(text, span.start, run))
        LOG(f"Expanded {run.expansions} templates, {len(run.assets)} assets", level=3)
        return "".join(output), run.assets

    def extend_palette(self, overrides: Mapping[str, str]) -> None:
        """
        Add colors to this processor's palette overlay.

        Overlay names take precedence over built-in names. Must not be
        called while a ``process`` call is running.
        """
        self.palette.extend(overrides)
        LOG(f"Palette extended with {len(overrides)} colors", level=2)

    def validate(self, source: str) -> None:
        """Raise the first error ``process`` would raise; discard output"""
        self.process_with_assets(source)

    def spans(self, source: str) -> List[SourceSpan]:
        """Literal, code and tag spans of ``source`` (for tooling)"""
        scanned = spans_scan(
            source, self.settings.fence_markers, self.settings.inline_code_delimiter
        )
        return spans_tokenize(source, scanned)

    # Work-list engine ------------------------------------------------------

    def text_expand(self, text: str, base: int, run: _Run) -> str:
        """Expand one literal region of the document"""
        stack = [
            _Job(
                text=text,
                depth=0,
                segments=[(0, len(text), base)],
                origin=base,
                context=self.context,
            )
        ]
        while True:
            job = stack[-1]
            child = self.job_step(job, run)
            if child is not None:
                stack.append(child)
                continue

            result = "".join(job.parts)
            if job.finish is not None:
                try:
                    result = job.finish(result)
                except MdfxError as e:
                    e.offset = job.origin
                    raise
            stack.pop()
            LOG(f"pop depth {job.depth} ({len(result)} chars)", level=3)
            if not stack:
                return result
            stack[-1].parts.append(result)

    def job_step(self, job: _Job, run: _Run) -> Optional[_Job]:
        """
        Advance ``job`` until it finishes or needs a child job expanded.

        Returns:
            The child job to run next, or None when ``job`` is complete
        """
        text = job.text
        while True:
            found = text.find(OPEN, job.pos)
            if found == -1:
                job.parts.append(text[job.pos :])
                job.pos = len(text)
                return None
            if found > job.pos:
                job.parts.append(text[job.pos : found])
            job.pos = found
            try:
                child = self.tag_dispatch(job, found, run)
            except MdfxError as e:
                e.offset = job.offset_map(found if e.offset is None else e.offset)
                raise
            if child is not None:
                return child

    def tag_dispatch(self, job: _Job, found: int, run: _Run) -> Optional[_Job]:
        """
        Handle the token at ``found``, in fixed priority order.

        Either appends output to ``job`` or returns a child job; in both
        cases ``job.pos`` is moved past the tag.
        """
        token = job.parser.token_read(found)
        if token is None:
            job.parts.append(OPEN[0])
            job.pos = found + 1
            return None
        if isinstance(token, ClosingTag):
            raise MismatchedClosingTag(None, token.name, found)

        kind = token.tag.kind
        LOG(f"dispatch {token.tag.display_name} at {job.offset_map(found)}", level=3)
        if kind is TagKind.UI:
            return self.ui_dispatch(job, token, run)
        if kind is TagKind.FRAME:
            return self.frame_dispatch(job, token)
        if kind is TagKind.BADGE:
            return self.badge_dispatch(job, token)
        if kind is TagKind.SHIELDS:
            return self.shields_dispatch(job, token, run)
        if kind is TagKind.STYLE:
            return self.style_dispatch(job, token)
        return self.partial_dispatch(job, token, run)

    def extent_get(self, job: _Job, token: ParsedTag) -> Tuple[Optional[str], int]:
        """
        Locate the tag's closer.

        Returns:
            ``(content, end)``: the raw inner text (None for self-closing
            tags) and the offset just past the closer
        """
        tag = token.tag
        if tag.self_closing:
            return None, token.head_end
        if tag.closer_policy is CloserPolicy.GENERIC:
            closer = job.parser.extent_matchGeneric(token)
        else:
            closer = job.parser.closer_findSpecific(token)
        tag.body_range = (token.head_end, closer.start)
        token.end = closer.end
        return job.text[token.head_end : closer.start], closer.end

    def child_make(
        self,
        job: _Job,
        token: ParsedTag,
        text: str,
        finish: Optional[Finisher] = None,
        body_starts: Sequence[int] = (),
    ) -> _Job:
        """
        Create the job expanding ``text`` on behalf of ``token``.

        ``body_starts`` lists the offsets in ``text`` where the tag's body
        was inserted unchanged (0 for a frame, each ``$content`` of a
        template); errors there keep their real source offsets.

        Raises:
            ExpansionLimitExceeded: If the child would be too deep
        """
        depth = job.depth + 1
        if depth > self.settings.max_expansion_depth:
            raise ExpansionLimitExceeded(self.settings.max_expansion_depth, "depth")
        segments: List[Segment] = []
        if token.tag.body_range is not None:
            body_start, body_end = token.tag.body_range
            for start in body_starts:
                segments.extend(
                    segments_slice(job.segments, body_start, body_end, start - body_start)
                )
        LOG(f"push {token.tag.display_name} at depth {depth}", level=3)
        return _Job(
            text=text,
            depth=depth,
            segments=segments,
            origin=job.offset_map(token.start),
            context=job.context,
            finish=finish,
        )

    def expansion_count(self, run: _Run) -> None:
        run.expansions += 1
        if run.expansions > self.settings.max_expansions:
            raise ExpansionLimitExceeded(self.settings.max_expansions, "count")

    def primitive_render(self, primitive: Primitive, run: _Run) -> str:
        """Render a primitive and collect it if it is a file"""
        try:
            asset = self.renderer.render(primitive)
        except MdfxError:
            raise
        except Exception as e:
            raise BackendError(e) from e
        if asset.is_file and asset.relative_path not in run.asset_paths:
            run.asset_paths.add(asset.relative_path)
            run.assets.append(asset)
        return asset.to_markdown()

    # Dispatch handlers -----------------------------------------------------

    def ui_dispatch(self, job: _Job, token: ParsedTag, run: _Run) -> Optional[_Job]:
        tag = token.tag
        self.expander.definition_resolve(tag, job.context)
        content, end = self.extent_get(job, token)
        output = self.expander.expand(tag, content, job.context)
        job.pos = end

        if isinstance(output, PrimitiveOutput):
            job.parts.append(self.primitive_render(output.primitive, run))
            return None

        self.expansion_count(run)
        finish = None
        if output.post_process is not None:
            post_process, params = output.post_process, output.params

            def finish(text: str) -> str:
                return postProcess_apply(post_process, text, params)

        return self.child_make(job, token, output.text, finish, output.content_starts)

    def frame_dispatch(self, job: _Job, token: ParsedTag) -> _Job:
        tag = token.tag
        if tag.self_closing:
            raise InvalidTagSyntax(f"frame '{tag.name}' needs content and a {{{{/frame}}}} closer")
        resolved = self.registry.resolve(tag.name, job.context, RenderableKind.FRAME)
        if resolved is None:
            raise UnknownFrame(
                tag.name, suggestions_find(tag.name, self.registry.names_list(RenderableKind.FRAME))
            )
        frame = resolved.definition
        content, end = self.extent_get(job, token)
        job.pos = end
        return self.child_make(
            job,
            token,
            content,
            finish=lambda text: f"{frame.prefix}{text}{frame.suffix}",
            body_starts=(0,),
        )

    def badge_dispatch(self, job: _Job, token: ParsedTag) -> None:
        tag = token.tag
        if tag.self_closing:
            raise InvalidTagSyntax(f"badge '{tag.name}' needs one character and a {{{{/badge}}}} closer")
        resolved = self.registry.resolve(tag.name, job.context, RenderableKind.BADGE)
        if resolved is None:
            raise UnknownBadge(
                tag.name, suggestions_find(tag.name, self.registry.names_list(RenderableKind.BADGE))
            )
        badge = resolved.definition
        content, end = self.extent_get(job, token)
        glyph = badge.chars.get(content) if content is not None and len(content) == 1 else None
        if glyph is None:
            raise UnsupportedChar(f"badge '{badge.id}'", content or "")
        job.parts.append(glyph)
        job.pos = end
        return None

    def shields_dispatch(self, job: _Job, token: ParsedTag, run: _Run) -> None:
        tag = token.tag
        if not tag.self_closing:
            raise InvalidTagSyntax(f"shields:{tag.name} is self-closing: use {{{{shields:{tag.name}/}}}}")
        primitive = self.shields_build(tag)
        job.parts.append(self.primitive_render(primitive, run))
        job.pos = token.head_end
        return None

    def shields_build(self, tag: Tag) -> Primitive:
        """
        Build the primitive named by a ``shields:*`` tag.

        Types and parameters:
            block    color, [style]
            twotone  left, right, [style]
            bar      colors (comma-separated), [style]
            icon     logo, [bg], [logoColor], [style]

        Raises:
            UnknownPrimitive: Unknown type
            InvalidParameterValue: Missing, unknown or invalid parameter
        """
        accepted = {
            "block": ("color", "style"),
            "twotone": ("left", "right", "style"),
            "bar": ("colors", "style"),
            "icon": ("logo", "bg", "logoColor", "style"),
        }
        if tag.name not in accepted:
            raise UnknownPrimitive(tag.name, suggestions_find(tag.name, SHIELDS_TYPES))
        params = tag.params
        for key, value in params.items():
            if key not in accepted[tag.name]:
                raise InvalidParameterValue(key, value, f"shields:{tag.name} has no parameter '{key}'")

        def required(key: str) -> str:
            value = params.get(key, "")
            if not value:
                raise InvalidParameterValue(key, value, f"required by shields:{tag.name}")
            return value

        color = self.palette.color_require
        style = self.registry.shieldStyle_resolve(params.get("style"))
        if tag.name == "block":
            return Swatch(color=color("color", required("color")), style=style)
        if tag.name == "twotone":
            return TwoTone(
                left=color("left", required("left")),
                right=color("right", required("right")),
                style=style,
            )
        if tag.name == "bar":
            colors = tuple(color("colors", c) for c in required("colors").split(",") if c.strip())
            return Divider(colors=colors, style=style)
        return Tech(
            name=required("logo"),
            bg_color=color("bg", params.get("bg") or "ui.bg"),
            logo_color=color("logoColor", params.get("logoColor") or "white"),
            style=style,
        )

    def style_dispatch(self, job: _Job, token: ParsedTag) -> None:
        tag = token.tag
        resolved = self.registry.resolve(tag.name, job.context, RenderableKind.STYLE)
        if resolved is None:
            if tag.args:
                raise UnknownNamespace(tag.name, suggestions_find(tag.name, NAMESPACES))
            raise UnknownStyle(
                tag.name, suggestions_find(tag.name, self.registry.names_list(RenderableKind.STYLE))
            )
        style = resolved.definition
        if tag.self_closing:
            raise InvalidTagSyntax(f"style '{tag.name}' needs content and a {{{{/{tag.name}}}}} closer")
        if tag.args:
            raise InvalidTagSyntax(
                f"style '{tag.name}' takes no positional arguments; use separator= or spacing="
            )
        convert_text = self.styleConverter_make(tag.params)
        content, end = self.extent_get(job, token)
        job.parts.append(convert_text(content or "", style))
        job.pos = end
        return None

    def styleConverter_make(self, params: Dict[str, str]) -> Callable:
        """
        Choose the conversion for a style's ``separator=``/``spacing=``.

        Raises:
            InvalidParameterValue: Unknown parameter, both parameters set,
                                   or spacing not an integer in range
        """
        for key, value in params.items():
            if key not in STYLE_PARAMS:
                raise InvalidParameterValue(key, value, "styles accept only separator= or spacing=")
        if "separator" in params and "spacing" in params:
            raise InvalidParameterValue(
                "separator", params["separator"], "separator and spacing are mutually exclusive"
            )
        if "spacing" in params:
            raw = params["spacing"]
            try:
                spacing = int(raw)
            except ValueError:
                raise InvalidParameterValue("spacing", raw, "expected an integer")
            if not 0 <= spacing <= self.settings.max_spacing:
                raise InvalidParameterValue(
                    "spacing", raw, f"expected 0..{self.settings.max_spacing}"
                )
            return lambda text, style: convert_with_spacing(text, style, spacing)
        if "separator" in params:
            separator = self.registry.separator_resolve(
                params["separator"], self.settings.separatorContext_make()
            )
            return lambda text, style: convert_with_separator(text, style, separator)
        return convert

    def partial_dispatch(self, job: _Job, token: ParsedTag, run: _Run) -> _Job:
        tag = token.tag
        resolved = self.registry.resolve(tag.name, job.context, RenderableKind.PARTIAL)
        if resolved is None:
            raise UnknownPartial(
                tag.name, suggestions_find(tag.name, self.registry.names_list(RenderableKind.PARTIAL))
            )
        content, end = self.extent_get(job, token)
        job.pos = end
        self.expansion_count(run)
        text, starts = partialTemplate_substitute(resolved.definition.template, content or "")
        return self.child_make(job, token, text, body_starts=starts)


def partialTemplate_substitute(template: str, content: str) -> Tuple[str, Tuple[int, ...]]:
    """
    Replace ``$content`` and ``$1`` with the partial's content.

    Returns the expanded text and the offset at which each copy of the
    content starts in it.
    """
    pieces: List[str] = []
    starts: List[int] = []
    length = 0
    cursor = 0
    while True:
        found = template.find("$", cursor)
        if found == -1:
            pieces.append(template[cursor:])
            return "".join(pieces), tuple(starts)
        pieces.append(template[cursor:found])
        length += found - cursor
        if template.startswith("$content", found):
            width = len("$content")
        elif template.startswith("$1", found) and not template[found + 2 : found + 3].isdigit():
            width = 2
        else:
            pieces.append("$")
            length += 1
            cursor = found + 1
            continue
        starts.append(length)
        pieces.append(content)
        length += len(content)
        cursor = found + width
