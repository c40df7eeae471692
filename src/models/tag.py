"""
Tag models

Structures produced by the tag parser and consumed by the processor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


# Namespaces recognized as the first head segment (when followed by ':')
NAMESPACES = frozenset({"ui", "frame", "badge", "shields", "partial"})

# Namespaces whose tags close with the generic "{{/namespace}}" closer
GENERIC_NAMESPACES = frozenset({"ui"})


class TagKind(Enum):
    """
    Dispatch classes, declared in dispatch priority order.

    ``ui`` → ``frame`` → ``badge`` → ``shields`` → bare style → ``partial``
    """

    UI = "ui"
    FRAME = "frame"
    BADGE = "badge"
    SHIELDS = "shields"
    STYLE = "style"
    PARTIAL = "partial"


class CloserPolicy(Enum):
    """How an open tag finds its closer"""

    GENERIC = "generic"  # {{/namespace}}, matched through the open-tag stack
    SPECIFIC = "specific"  # {{/name}}, first exact occurrence wins


@dataclass
class Tag:
    """
    One ``{{...}}`` template unit.

    Attributes:
        namespace: Reserved namespace (e.g. "ui", "frame") or None for a
                   bare style name
        name: Tag name (e.g. "gradient", "mathbold")
        args: Positional arguments in source order
        params: Named ``key=value`` arguments
        self_closing: True for ``{{.../}}``
        body_range: ``(start, end)`` of the content between head and
                    closer, None for self-closing tags

    Example:
        "{{ui:swatch:accent/}}" →
        Tag(namespace="ui", name="swatch", args=("accent",), params={},
            self_closing=True, body_range=None)
    """

    namespace: Optional[str]
    name: str
    args: Tuple[str, ...] = ()
    params: Dict[str, str] = field(default_factory=dict)
    self_closing: bool = False
    body_range: Optional[Tuple[int, int]] = None

    def __post_init__(self) -> None:
        if self.self_closing and self.body_range is not None:
            raise ValueError(f"self-closing tag '{self.name}' cannot carry a body")

    @property
    def kind(self) -> TagKind:
        if self.namespace is None:
            return TagKind.STYLE
        return TagKind(self.namespace)

    @property
    def closer_policy(self) -> CloserPolicy:
        if self.namespace in GENERIC_NAMESPACES:
            return CloserPolicy.GENERIC
        return CloserPolicy.SPECIFIC

    @property
    def closer_name(self) -> str:
        """
        Name expected inside the closer.

        Namespaced tags close with their namespace ({{/ui}}, {{/frame}},
        {{/badge}}); bare styles close with their own name ({{/mathbold}}).
        """
        return self.namespace or self.name

    @property
    def display_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}:{self.name}"
        return self.name


@dataclass
class ParsedTag:
    """
    A tag head recognized at a position.

    Attributes:
        tag: The parsed tag (body_range filled in once the closer is known)
        start: Offset of the opening ``{{``
        head_end: Offset just past the head's ``}}`` (or ``/}}``)
        end: Offset just past the closer; equals head_end until matched
    """

    tag: Tag
    start: int
    head_end: int
    end: int


@dataclass
class ClosingTag:
    """A ``{{/name}}`` closer at ``[start, end)``"""

    name: str
    start: int
    end: int


@dataclass
class OpenTagEntry:
    """
    One entry of the open-tag stack used for generic closer matching.

    Attributes:
        closer_policy: Policy of the tag that pushed this entry
        name: Closer name the entry waits for
        open_offset: Offset of the tag's opening ``{{``
    """

    closer_policy: CloserPolicy
    name: str
    open_offset: int
