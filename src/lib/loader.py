"""
Registry data loader

Reads renderable definitions from YAML (the built-in ``data/registry.yaml``
or a caller-supplied file) and builds the immutable definition tables the
Registry is constructed from.
"""

import yaml
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from string import ascii_lowercase, ascii_uppercase, digits
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from ..models.context import ContextKind
from ..models.renderables import (
    ALL_CONTEXTS,
    BadgeDef,
    ComponentDef,
    FrameDef,
    PartialDef,
    PostProcess,
    PostProcessKind,
    RenderableKind,
    SeparatorDef,
    StyleDef,
    Timing,
)
from .errors import ConfigurationError
from .log import LOG


BUILTIN_REGISTRY = Path(__file__).parent.parent / "data" / "registry.yaml"


@dataclass(frozen=True)
class RegistryData:
    """
    Everything a Registry is built from.

    Attributes:
        tables: Definitions keyed by id, one table per renderable kind
        palette: Built-in named colors
        shield_styles: Shield style ids mapped to their aliases
        default_shield_style: Style used when a primitive names none
    """

    tables: Mapping[RenderableKind, Mapping[str, Any]]
    palette: Mapping[str, str]
    shield_styles: Mapping[str, Tuple[str, ...]]
    default_shield_style: str


@lru_cache(maxsize=8)
def _document_load(path: str) -> Dict[str, Any]:
    """Parse a registry file once per path"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to load {path}: {e}")
    if not isinstance(document, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    return document


def _contexts(entry: Dict[str, Any], where: str) -> FrozenSet[ContextKind]:
    names = entry.get("contexts")
    if names is None:
        return ALL_CONTEXTS
    try:
        return frozenset(ContextKind(name) for name in names)
    except ValueError as e:
        raise ConfigurationError(f"{where}: {e}")


def _aliases(entry: Dict[str, Any]) -> Tuple[str, ...]:
    return tuple(str(alias) for alias in entry.get("aliases") or ())


def _aligned(keys: str, glyphs: str, where: str) -> Mapping[str, str]:
    """Zip index-aligned key and glyph strings into a mapping"""
    if len(glyphs) != len(keys):
        raise ConfigurationError(
            f"{where}: expected {len(keys)} glyphs, found {len(glyphs)}"
        )
    return MappingProxyType(dict(zip(keys, glyphs)))


def style_build(style_id: str, entry: Dict[str, Any]) -> StyleDef:
    """
    Build a StyleDef from its compact YAML form.

    Example:
        mathbold:
          upper: "𝐀𝐁𝐂..."     # 26 glyphs, A-Z
          lower: "𝐚𝐛𝐜..."     # 26 glyphs, a-z
          digits: "𝟎𝟏𝟐..."    # 10 glyphs, 0-9
    """
    where = f"style '{style_id}'"
    empty: Mapping[str, str] = MappingProxyType({})
    upper = entry.get("upper")
    lower = entry.get("lower")
    numbers = entry.get("digits")
    return StyleDef(
        id=style_id,
        aliases=_aliases(entry),
        contexts=_contexts(entry, where),
        description=entry.get("description", ""),
        category=entry.get("category", ""),
        upper=_aligned(ascii_uppercase, upper, f"{where} upper") if upper else empty,
        lower=_aligned(ascii_lowercase, lower, f"{where} lower") if lower else empty,
        digits=_aligned(digits, numbers, f"{where} digits") if numbers else empty,
        extra=MappingProxyType(dict(entry.get("extra") or {})),
    )


def frame_build(frame_id: str, entry: Dict[str, Any]) -> FrameDef:
    return FrameDef(
        id=frame_id,
        aliases=_aliases(entry),
        contexts=_contexts(entry, f"frame '{frame_id}'"),
        description=entry.get("description", ""),
        prefix=str(entry.get("prefix", "")),
        suffix=str(entry.get("suffix", "")),
    )


def badge_build(badge_id: str, entry: Dict[str, Any]) -> BadgeDef:
    where = f"badge '{badge_id}'"
    return BadgeDef(
        id=badge_id,
        aliases=_aliases(entry),
        contexts=_contexts(entry, where),
        description=entry.get("description", ""),
        chars=_aligned(str(entry.get("keys", "")), str(entry.get("values", "")), where),
    )


def separator_build(separator_id: str, entry: Dict[str, Any]) -> SeparatorDef:
    char = str(entry.get("char", ""))
    if not char:
        raise ConfigurationError(f"separator '{separator_id}' has no char")
    return SeparatorDef(
        id=separator_id,
        aliases=_aliases(entry),
        contexts=_contexts(entry, f"separator '{separator_id}'"),
        description=entry.get("description", ""),
        char=char,
    )


def component_build(component_id: str, entry: Dict[str, Any]) -> ComponentDef:
    """
    Build a ComponentDef, checking that it is either native or templated.

    Raises:
        ConfigurationError: On a missing template, an unknown post-process
                            kind or timing, or defaults for undeclared args
    """
    where = f"component '{component_id}'"
    native = bool(entry.get("native", False))
    template = str(entry.get("template", ""))
    if not native and not template:
        raise ConfigurationError(f"{where}: needs a template or native: true")

    args = tuple(str(arg) for arg in entry.get("args") or ())
    defaults = {str(k): str(v) for k, v in (entry.get("defaults") or {}).items()}
    undeclared = set(defaults) - set(args)
    if undeclared:
        raise ConfigurationError(f"{where}: defaults for undeclared args {sorted(undeclared)}")

    post_process = None
    transform = entry.get("post_process")
    if transform:
        try:
            post_process = PostProcess(
                kind=PostProcessKind(transform["kind"]),
                timing=Timing(transform.get("timing", "pre_expand")),
            )
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"{where}: invalid post_process: {e}")

    return ComponentDef(
        id=component_id,
        aliases=_aliases(entry),
        contexts=_contexts(entry, where),
        description=entry.get("description", ""),
        self_closing=bool(entry.get("self_closing", False)),
        native=native,
        template=template,
        args=args,
        defaults=MappingProxyType(defaults),
        params=MappingProxyType(
            {str(k): str(v) for k, v in (entry.get("params") or {}).items()}
        ),
        post_process=post_process,
    )


def partial_build(partial_id: str, template: str, description: str = "") -> PartialDef:
    return PartialDef(
        id=partial_id,
        contexts=frozenset({ContextKind.INLINE, ContextKind.BLOCK}),
        description=description,
        template=template,
    )


_builders = {
    RenderableKind.STYLE: ("styles", style_build),
    RenderableKind.FRAME: ("frames", frame_build),
    RenderableKind.BADGE: ("badges", badge_build),
    RenderableKind.SEPARATOR: ("separators", separator_build),
    RenderableKind.COMPONENT: ("components", component_build),
}


def registryData_load(
    path: Optional[Path] = None, partials: Optional[Mapping[str, str]] = None
) -> RegistryData:
    """
    Load registry tables from YAML.

    Args:
        path: Registry file (defaults to the built-in one)
        partials: User partial templates keyed by name

    Returns:
        Immutable RegistryData

    Raises:
        ConfigurationError: On any structural problem, naming the entry
    """
    path = Path(path) if path is not None else BUILTIN_REGISTRY
    document = _document_load(str(path))

    tables: Dict[RenderableKind, Mapping[str, Any]] = {}
    for kind, (section, build) in _builders.items():
        entries = document.get(section) or {}
        if not isinstance(entries, dict):
            raise ConfigurationError(f"{path}: '{section}' must be a mapping")
        table = {}
        for entry_id, entry in entries.items():
            if not isinstance(entry, dict):
                raise ConfigurationError(f"{path}: {section}.{entry_id} must be a mapping")
            table[str(entry_id)] = build(str(entry_id), entry)
        tables[kind] = MappingProxyType(table)

    tables[RenderableKind.PARTIAL] = MappingProxyType(
        {name: partial_build(name, template) for name, template in (partials or {}).items()}
    )

    palette = {str(k): str(v).upper() for k, v in (document.get("palette") or {}).items()}

    shields = document.get("shield_styles") or {}
    styles = {
        str(name): tuple(str(a) for a in (aliases or ()))
        for name, aliases in (shields.get("styles") or {}).items()
    }
    default_style = str(shields.get("default", "flat-square"))
    if styles and default_style not in styles:
        raise ConfigurationError(f"{path}: default shield style '{default_style}' is not defined")

    LOG(
        f"Registry {path.name}: "
        + ", ".join(f"{len(table)} {kind.value}s" for kind, table in tables.items()),
        level=2,
    )
    return RegistryData(
        tables=MappingProxyType(tables),
        palette=MappingProxyType(palette),
        shield_styles=MappingProxyType(styles),
        default_shield_style=default_style,
    )
