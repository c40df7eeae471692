"""
Renderable definitions

Immutable records held by the registry. Every definition carries its
canonical id, its aliases, and the set of evaluation contexts it supports.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional, Tuple

from .context import ContextKind


ALL_CONTEXTS = frozenset(ContextKind)


def _empty() -> Mapping[str, str]:
    return MappingProxyType({})


class RenderableKind(Enum):
    """Registry tables, in cross-kind lookup order"""

    STYLE = "style"
    FRAME = "frame"
    BADGE = "badge"
    SEPARATOR = "separator"
    COMPONENT = "component"
    PARTIAL = "partial"


class PostProcessKind(Enum):
    BLOCKQUOTE = "blockquote"
    ROW = "row"


class Timing(Enum):
    PRE_EXPAND = "pre_expand"  # right after substitution, before re-parsing
    POST_EXPAND = "post_expand"  # after the expansion is fully resolved


@dataclass(frozen=True)
class PostProcess:
    kind: PostProcessKind
    timing: Timing


@dataclass(frozen=True, kw_only=True)
class RenderableDef:
    """
    Fields shared by every registry entry.

    Attributes:
        id: Canonical name
        aliases: Alternative names resolving to the same entry
        contexts: Context kinds the entry may be used in
        description: Human readable summary
    """

    id: str
    aliases: Tuple[str, ...] = ()
    contexts: FrozenSet[ContextKind] = ALL_CONTEXTS
    description: str = ""


@dataclass(frozen=True, kw_only=True)
class StyleDef(RenderableDef):
    """
    A Unicode character style.

    Attributes:
        category: Grouping label (e.g. "bold", "boxed")
        upper: Mapping for 'A'-'Z'
        lower: Mapping for 'a'-'z'
        digits: Mapping for '0'-'9'
        extra: Mapping for any other characters
    """

    category: str = ""
    upper: Mapping[str, str] = field(default_factory=_empty)
    lower: Mapping[str, str] = field(default_factory=_empty)
    digits: Mapping[str, str] = field(default_factory=_empty)
    extra: Mapping[str, str] = field(default_factory=_empty)

    def char_map(self, char: str) -> Optional[str]:
        """Return the styled glyph for ``char`` or None when unmapped"""
        if "A" <= char <= "Z":
            table = self.upper
        elif "a" <= char <= "z":
            table = self.lower
        elif "0" <= char <= "9":
            table = self.digits
        else:
            table = self.extra
        return table.get(char) or self.extra.get(char)


@dataclass(frozen=True, kw_only=True)
class FrameDef(RenderableDef):
    prefix: str = ""
    suffix: str = ""


@dataclass(frozen=True, kw_only=True)
class BadgeDef(RenderableDef):
    """An enclosure for single characters (e.g. "1" → "①")"""

    chars: Mapping[str, str] = field(default_factory=_empty)


@dataclass(frozen=True, kw_only=True)
class SeparatorDef(RenderableDef):
    char: str = ""


@dataclass(frozen=True, kw_only=True)
class ComponentDef(RenderableDef):
    """
    A ``ui:*`` component.

    A component either names a native handler (``native=True``), which
    builds a Primitive, or carries a template expanded by substitution.

    Attributes:
        self_closing: True if the component is called as ``{{ui:name/}}``
        native: Built by a handler instead of a template
        template: Template text with ``$1``, ``$2``, ... and ``$content``
        args: Names of positional arguments, in order
        defaults: Default values keyed by positional argument name
        params: Accepted named parameters with their default values
        post_process: Optional transform applied to the expansion
    """

    self_closing: bool = False
    native: bool = False
    template: str = ""
    args: Tuple[str, ...] = ()
    defaults: Mapping[str, str] = field(default_factory=_empty)
    params: Mapping[str, str] = field(default_factory=_empty)
    post_process: Optional[PostProcess] = None


@dataclass(frozen=True, kw_only=True)
class PartialDef(RenderableDef):
    """A user-defined template invoked as ``{{partial:name}}``"""

    template: str = ""


@dataclass(frozen=True)
class ResolvedRenderable:
    """Result of a registry lookup: the table it came from and its definition"""

    kind: RenderableKind
    id: str
    definition: Any = field(compare=False)
