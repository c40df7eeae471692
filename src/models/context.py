"""
Evaluation contexts

An evaluation context classifies the usage site of a renderable. Every
registry entry declares the contexts it supports; a lookup made from a
given context only succeeds for entries whose declared context promotes
to it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ContextKind(str, Enum):
    """The three usage-site classes"""

    INLINE = "inline"
    BLOCK = "block"
    FRAME_CHROME = "frame_chrome"

    def promotes_to(self, other: "ContextKind") -> bool:
        """
        Check whether something valid here is also valid in ``other``.

        Promotion is reflexive. Inline and frame chrome promote to each
        other and to block; block promotes to nothing else.

        Example:
            >>> ContextKind.INLINE.promotes_to(ContextKind.BLOCK)
            True
            >>> ContextKind.BLOCK.promotes_to(ContextKind.INLINE)
            False
        """
        if self is other:
            return True
        return self in (ContextKind.INLINE, ContextKind.FRAME_CHROME)


@dataclass(frozen=True)
class EvalContext:
    """
    A usage-site context with its optional size limit.

    Attributes:
        kind: Context class
        limit: ``max_graphemes`` for inline, ``max_length`` for frame
               chrome, None for block
    """

    kind: ContextKind
    limit: Optional[int] = None

    @classmethod
    def inline(cls, max_graphemes: int = 1) -> "EvalContext":
        return cls(ContextKind.INLINE, max_graphemes)

    @classmethod
    def block(cls) -> "EvalContext":
        return cls(ContextKind.BLOCK, None)

    @classmethod
    def frame_chrome(cls, max_length: int = 16) -> "EvalContext":
        return cls(ContextKind.FRAME_CHROME, max_length)

    @classmethod
    def context_fromName(
        cls, name: str, max_graphemes: int = 1, max_length: int = 16
    ) -> "EvalContext":
        """
        Build a context from its configuration name.

        Args:
            name: One of "inline", "block", "frame_chrome"
            max_graphemes: Limit used when name is "inline"
            max_length: Limit used when name is "frame_chrome"

        Raises:
            ValueError: If the name is not a context
        """
        kind = ContextKind(name)
        if kind is ContextKind.INLINE:
            return cls.inline(max_graphemes)
        if kind is ContextKind.FRAME_CHROME:
            return cls.frame_chrome(max_length)
        return cls.block()

    def promotes_to(self, other: "EvalContext") -> bool:
        return self.kind.promotes_to(other.kind)

    def admits(self, declared) -> bool:
        """True if any of the ``declared`` context kinds promotes to this context"""
        return any(kind.promotes_to(self.kind) for kind in declared)

    def __str__(self) -> str:
        if self.limit is None:
            return self.kind.value
        return f"{self.kind.value}({self.limit})"
