"""
Component expander

Turns one ``ui:*`` tag into either a Primitive (native components) or a
template string (templated components) ready to be processed again.

Expansion order for templates:
    1. every positional argument is resolved against the palette
    2. ``$1``, ``$2``, ... and ``$content`` are substituted
    3. palette names inside the template's own color parameters are
       resolved; substituted text is never rewritten by this pass
    4. a PRE_EXPAND transform is applied; a POST_EXPAND transform is
       handed back to the processor to run after recursive expansion
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..models.context import EvalContext
from ..models.primitive import Divider, Primitive, Status, Swatch, Tech
from ..models.renderables import (
    ComponentDef,
    PostProcess,
    PostProcessKind,
    RenderableKind,
    Timing,
)
from ..models.tag import Tag
from .errors import (
    ComponentShapeMismatch,
    ConfigurationError,
    InvalidParameterValue,
    MissingRequiredArg,
    UnknownComponent,
)
from .log import LOG
from .palette import Palette
from .registry import Registry, suggestions_find
from .transforms import blockquote_apply, row_apply


_placeholder_pattern = re.compile(r"\$(content|\d+)")


@dataclass
class PrimitiveOutput:
    primitive: Primitive


@dataclass
class TemplateOutput:
    """
    Expanded template text.

    Attributes:
        text: Template after substitution (and any PRE_EXPAND transform)
        post_process: Transform to apply once ``text`` is fully expanded
        params: Named parameters the transform may need (e.g. align)
        content_starts: Offsets in ``text`` where the tag content was
            inserted unchanged; empty once a PRE_EXPAND transform has
            rewritten the text
    """

    text: str
    post_process: Optional[PostProcess] = None
    params: Dict[str, str] = field(default_factory=dict)
    content_starts: Tuple[int, ...] = ()


ComponentOutput = Union[PrimitiveOutput, TemplateOutput]

NativeHandler = Callable[["ComponentExpander", ComponentDef, List[str], Dict[str, str]], Primitive]


def postProcess_apply(post_process: PostProcess, text: str, params: Mapping[str, str]) -> str:
    """Run one transform over ``text``"""
    if post_process.kind is PostProcessKind.BLOCKQUOTE:
        return blockquote_apply(text)
    return row_apply(text, params.get("align", "center"))


class ComponentExpander:
    """
    Expands components against a registry and palette.

    Args:
        registry: Source of component definitions
        palette: Palette used for argument and color resolution
    """

    def __init__(self, registry: Registry, palette: Palette):
        self.registry = registry
        self.palette = palette

    def expand(self, tag: Tag, content: Optional[str], context: EvalContext) -> ComponentOutput:
        """
        Expand one component call.

        Args:
            tag: The ``ui:*`` tag
            content: Raw inner text, None for self-closing calls
            context: Evaluation context of the call site

        Returns:
            PrimitiveOutput or TemplateOutput

        Raises:
            UnknownComponent: No component of that name
            ContextMismatch: Component not valid in ``context``
            ComponentShapeMismatch: Content given to a self-closing
                                    component or vice versa
            MissingRequiredArg: A required position is absent
            InvalidParameterValue: Undeclared or invalid named parameter
        """
        definition = self.definition_resolve(tag, context)
        params = self.params_merge(definition, tag.params)

        if definition.native:
            args = self.args_resolve(definition, tag.args, len(definition.args))
            handler = NATIVE_HANDLERS.get(definition.id)
            if handler is None:
                raise ConfigurationError(f"component '{definition.id}' has no native handler")
            LOG(f"native ui:{definition.id} args={args}", level=3)
            return PrimitiveOutput(handler(self, definition, args, params))

        text, starts = self.template_substitute(definition, tag.args, content or "")
        post_process = definition.post_process
        if post_process is not None and post_process.timing is Timing.PRE_EXPAND:
            text = postProcess_apply(post_process, text, params)
            post_process = None
            starts = ()
        LOG(f"template ui:{definition.id} → {len(text)} chars", level=3)
        return TemplateOutput(
            text=text, post_process=post_process, params=params, content_starts=starts
        )

    def definition_resolve(self, tag: Tag, context: EvalContext) -> ComponentDef:
        """
        Look up the component a tag calls and check the call shape.

        Raises:
            UnknownComponent, ContextMismatch, ComponentShapeMismatch
        """
        resolved = self.registry.resolve(tag.name, context, RenderableKind.COMPONENT)
        if resolved is None:
            raise UnknownComponent(
                tag.name,
                suggestions_find(tag.name, self.registry.names_list(RenderableKind.COMPONENT)),
            )
        definition: ComponentDef = resolved.definition
        if tag.self_closing != definition.self_closing:
            raise ComponentShapeMismatch(definition.id, definition.self_closing)
        return definition

    def params_merge(self, definition: ComponentDef, given: Mapping[str, str]) -> Dict[str, str]:
        """Declared parameter defaults overlaid with the call's values"""
        for key, value in given.items():
            if key not in definition.params:
                raise InvalidParameterValue(
                    key, value, f"component '{definition.id}' has no parameter '{key}'"
                )
        return {**definition.params, **given}

    def arg_get(self, definition: ComponentDef, args: Sequence[str], index: int) -> str:
        """
        Palette-resolved value of the 1-based position ``index``.

        Falls back to the declared default for that position.
        """
        if index <= len(args):
            return self.palette.value_resolve(args[index - 1])
        if index <= len(definition.args):
            name = definition.args[index - 1]
            if name in definition.defaults:
                return self.palette.value_resolve(definition.defaults[name])
        raise MissingRequiredArg(definition.id, index)

    def args_resolve(self, definition: ComponentDef, args: Sequence[str], count: int) -> List[str]:
        return [self.arg_get(definition, args, index) for index in range(1, count + 1)]

    def template_substitute(
        self, definition: ComponentDef, args: Sequence[str], content: str
    ) -> Tuple[str, Tuple[int, ...]]:
        """
        Substitute placeholders into the template.

        Returns the text and the offset of each inserted copy of ``content``.

        Example:
            template "{{ui:swatch:$1/}} $content", args ("accent",),
            content "hi" → ("{{ui:swatch:F41C80/}} hi", (22,))
        """
        pieces: List[str] = []
        starts: List[int] = []
        cursor = 0
        template = definition.template
        for match in _placeholder_pattern.finditer(template):
            pieces.append(self.palette.refs_resolve(template[cursor : match.start()]))
            placeholder = match.group(1)
            if placeholder == "content":
                starts.append(sum(map(len, pieces)))
                pieces.append(content)
            else:
                pieces.append(self.arg_get(definition, args, int(placeholder)))
            cursor = match.end()
        pieces.append(self.palette.refs_resolve(template[cursor:]))
        return "".join(pieces), tuple(starts)

    def shieldStyle_get(self, params: Mapping[str, str]) -> str:
        return self.registry.shieldStyle_resolve(params.get("style"))


def divider_build(expander, definition, args, params) -> Primitive:
    colors = tuple(
        expander.palette.color_require("colors", item)
        for item in params.get("colors", "").split(",")
        if item.strip()
    )
    if not colors:
        raise InvalidParameterValue("colors", params.get("colors", ""), "at least one color is required")
    return Divider(colors=colors, style=expander.shieldStyle_get(params))


def swatch_build(expander, definition, args, params) -> Primitive:
    return Swatch(
        color=expander.palette.color_require("color", args[0]),
        style=expander.shieldStyle_get(params),
        label=params.get("label") or None,
    )


def tech_build(expander, definition, args, params) -> Primitive:
    return Tech(
        name=args[0],
        bg_color=expander.palette.color_require("bg", params.get("bg", "")),
        logo_color=expander.palette.color_require("logo", params.get("logo", "")),
        style=expander.shieldStyle_get(params),
    )


def status_build(expander, definition, args, params) -> Primitive:
    return Status(level=args[0], style=expander.shieldStyle_get(params))


NATIVE_HANDLERS: Dict[str, NativeHandler] = {
    "divider": divider_build,
    "swatch": swatch_build,
    "tech": tech_build,
    "status": status_build,
}
