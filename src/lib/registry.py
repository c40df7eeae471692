"""
Renderable registry

Alias-aware, immutable lookup of styles, frames, badges, separators,
components and partials, with evaluation-context validation.

A Registry is built once (per Processor) and never changes afterwards;
the palette overlay lives in the Processor's Palette, not here.
"""

import difflib
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import regex

from ..models.context import EvalContext
from ..models.renderables import RenderableKind, ResolvedRenderable, SeparatorDef
from .errors import ContextMismatch, InvalidParameterValue, UnknownSeparator
from .loader import RegistryData, registryData_load


RESERVED_SEPARATOR_CHARS = frozenset(":/}")
MAX_ALTERNATIVES = 5


def suggestions_find(name: str, candidates, limit: int = 3) -> List[str]:
    """
    Close matches for ``name`` among ``candidates`` (best effort).

    Example:
        >>> suggestions_find("mathbld", ["mathbold", "italic"])
        ['mathbold']
    """
    return difflib.get_close_matches(name, sorted(set(candidates)), n=limit, cutoff=0.6)


def graphemes_split(value: str) -> List[str]:
    """Split text into extended grapheme clusters"""
    return regex.findall(r"\X", value)


class Registry:
    """
    Immutable renderable tables.

    Attributes:
        tables: Definitions keyed by id, per kind
        palette: Built-in named colors
        shield_styles: Shield style ids mapped to their aliases
        default_shield_style: Style used when none is given

    Example:
        >>> registry = Registry.builtin()
        >>> registry.resolve("mb", EvalContext.block()).id
        'mathbold'
    """

    def __init__(self, data: RegistryData):
        self.tables: Mapping[RenderableKind, Mapping[str, Any]] = data.tables
        self.palette: Mapping[str, str] = data.palette
        self.shield_styles: Mapping[str, Tuple[str, ...]] = data.shield_styles
        self.default_shield_style: str = data.default_shield_style

        names: Dict[RenderableKind, Mapping[str, str]] = {}
        for kind, table in self.tables.items():
            index: Dict[str, str] = {}
            for definition in table.values():
                index.setdefault(definition.id, definition.id)
            for definition in table.values():
                for alias in definition.aliases:
                    index.setdefault(alias, definition.id)
            names[kind] = MappingProxyType(index)
        self._names: Mapping[RenderableKind, Mapping[str, str]] = MappingProxyType(names)

    @classmethod
    def builtin(cls, partials: Optional[Mapping[str, str]] = None) -> "Registry":
        """Registry over the shipped definitions plus optional user partials"""
        return cls(registryData_load(None, partials))

    @classmethod
    def from_file(
        cls, path: Path, partials: Optional[Mapping[str, str]] = None
    ) -> "Registry":
        return cls(registryData_load(path, partials))

    # Lookup ----------------------------------------------------------------

    def definition_get(self, kind: RenderableKind, name: str) -> Optional[Any]:
        """Look up by id or alias within one kind, ignoring contexts"""
        canonical = self._names.get(kind, {}).get(name)
        if canonical is None:
            return None
        return self.tables[kind][canonical]

    def names_list(self, kind: RenderableKind) -> List[str]:
        """All ids and aliases of one kind"""
        return sorted(self._names.get(kind, {}))

    def resolve(
        self, name: str, context: EvalContext, kind: Optional[RenderableKind] = None
    ) -> Optional[ResolvedRenderable]:
        """
        Resolve a name in a context.

        Kinds are searched in RenderableKind order (or only ``kind`` when
        given). The first candidate whose declared contexts promote to
        ``context`` wins.

        Args:
            name: Id or alias
            context: Requesting context
            kind: Restrict the search to one table

        Returns:
            The resolved renderable, or None if the name matches nothing

        Raises:
            ContextMismatch: If the name exists but no candidate is valid in
                             ``context``
        """
        kinds = [kind] if kind is not None else list(RenderableKind)
        mismatched = []
        for candidate_kind in kinds:
            definition = self.definition_get(candidate_kind, name)
            if definition is None:
                continue
            if context.admits(definition.contexts):
                return ResolvedRenderable(candidate_kind, definition.id, definition)
            mismatched.append((candidate_kind, definition))

        if not mismatched:
            return None
        candidate_kind, definition = mismatched[0]
        raise ContextMismatch(
            name,
            sorted(c.value for c in definition.contexts),
            str(context),
            self.alternatives_find(name, candidate_kind, context),
        )

    def alternatives_find(
        self, name: str, kind: RenderableKind, context: EvalContext
    ) -> List[str]:
        """Same-kind ids valid in ``context``, closest names first"""
        valid = self.list_for_context(context, kind)
        ranked = difflib.get_close_matches(name, valid, n=MAX_ALTERNATIVES, cutoff=0.0)
        return ranked[:MAX_ALTERNATIVES]

    def list_for_context(
        self, context: EvalContext, kind: Optional[RenderableKind] = None
    ) -> List[str]:
        """
        Canonical ids usable in ``context``.

        Example:
            >>> "divider" in Registry.builtin().list_for_context(EvalContext.inline())
            False
        """
        kinds = [kind] if kind is not None else list(RenderableKind)
        usable = set()
        for candidate_kind in kinds:
            for definition in self.tables.get(candidate_kind, {}).values():
                if context.admits(definition.contexts):
                    usable.add(definition.id)
        return sorted(usable)

    # Separators ------------------------------------------------------------

    def separator_resolve(self, value: str, context: EvalContext) -> str:
        """
        Resolve a ``separator=`` value to the text inserted between glyphs.

        Steps:
            1. Trim surrounding whitespace; reject empty input and the
               reserved characters ':', '/', '}'.
            2. Named lookup: a separator id or alias valid in ``context``.
               A name that exists in any table but is not valid in
               ``context`` is a ContextMismatch.
            3. Otherwise the value must be exactly one grapheme cluster
               (emoji ZWJ sequences and flags count as one) and fit the
               context's grapheme limit.

        Args:
            value: Raw parameter value
            context: Separator context (normally inline)

        Returns:
            The separator text

        Raises:
            InvalidParameterValue: Empty or reserved value
            ContextMismatch: Named renderable not usable in ``context``
            UnknownSeparator: Neither a name nor a single grapheme

        Example:
            >>> registry.separator_resolve(" dot ", EvalContext.inline())
            '·'
            >>> registry.separator_resolve("👨‍💻", EvalContext.inline())
            '👨‍💻'
        """
        trimmed = value.strip()
        if not trimmed:
            raise InvalidParameterValue("separator", value, "separator cannot be empty")
        if trimmed in RESERVED_SEPARATOR_CHARS:
            raise InvalidParameterValue("separator", value, f"'{trimmed}' is reserved")

        separator = self.resolve(trimmed, context, RenderableKind.SEPARATOR)
        if separator is not None:
            definition: SeparatorDef = separator.definition
            return definition.char
        # A non-separator name still has to be usable here
        self.resolve(trimmed, context)

        clusters = graphemes_split(trimmed)
        limit = context.limit if context.limit is not None else 1
        if len(clusters) == 1 and len(clusters) <= limit:
            if any(ch in RESERVED_SEPARATOR_CHARS for ch in trimmed):
                raise InvalidParameterValue("separator", value, "contains a reserved character")
            return trimmed
        raise UnknownSeparator(
            trimmed, suggestions_find(trimmed, self.names_list(RenderableKind.SEPARATOR))
        )

    # Shields ---------------------------------------------------------------

    def shieldStyle_resolve(self, name: Optional[str]) -> str:
        """
        Canonical shield style for ``name``; the default for None or "".

        Raises:
            InvalidParameterValue: If the style is unknown
        """
        if not name:
            return self.default_shield_style
        for style, aliases in self.shield_styles.items():
            if name == style or name in aliases:
                return style
        raise InvalidParameterValue(
            "style",
            name,
            f"unknown shield style (known: {', '.join(sorted(self.shield_styles))})",
        )

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind.value}={len(t)}" for kind, t in self.tables.items())
        return f"Registry({counts})"
