"""
Error taxonomy for mdfx

Every failure aborts the enclosing ``process`` call. Errors carry the
offset of the offending tag in the top-level source so that callers can
render a precise diagnostic (see ``lib.diagnostics``).

Hierarchy:
    MdfxError
    ├── TemplateSyntaxError: UnclosedTag, MismatchedClosingTag, InvalidTagSyntax
    ├── ResolutionError
    │   ├── UnknownRenderable: UnknownStyle, UnknownFrame, UnknownBadge,
    │   │   UnknownComponent, UnknownSeparator, UnknownPartial, UnknownNamespace,
    │   │   UnknownPrimitive
    │   └── ContextMismatch
    ├── SemanticError: UnsupportedChar, InvalidParameterValue
    ├── ExpansionError: MissingRequiredArg, ComponentShapeMismatch,
    │   ExpansionLimitExceeded
    ├── BackendError
    └── ConfigurationError
"""

from typing import Optional, Sequence


class MdfxError(Exception):
    """
    Base class for every mdfx failure.

    Attributes:
        offset: Position of the offending tag in the source string, or None
                when the error is not tied to a position
    """

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} (at offset {self.offset})"


# Syntax ---------------------------------------------------------------------


class TemplateSyntaxError(MdfxError):
    pass


class UnclosedTag(TemplateSyntaxError):
    def __init__(self, name: str, offset: Optional[int] = None):
        self.name = name
        super().__init__(f"unclosed tag '{name}'", offset)


class MismatchedClosingTag(TemplateSyntaxError):
    """
    A closer that does not match the tag it would close.

    ``expected`` is None for a stray closer with no tag open.
    """

    def __init__(self, expected: Optional[str], found: str, offset: Optional[int] = None):
        self.expected = expected
        self.found = found
        if expected is None:
            message = f"closing tag '{{{{/{found}}}}}' has no matching open tag"
        else:
            message = f"expected '{{{{/{expected}}}}}' but found '{{{{/{found}}}}}'"
        super().__init__(message, offset)


class InvalidTagSyntax(TemplateSyntaxError):
    def __init__(self, reason: str, offset: Optional[int] = None):
        self.reason = reason
        super().__init__(f"invalid tag syntax: {reason}", offset)


# Resolution -----------------------------------------------------------------


class ResolutionError(MdfxError):
    pass


class UnknownRenderable(ResolutionError):
    """
    A name that resolves to nothing.

    Attributes:
        name: The attempted name
        suggestions: Close matches among known names (best effort)
    """

    kind = "renderable"

    def __init__(self, name: str, suggestions: Sequence[str] = (), offset: Optional[int] = None):
        self.name = name
        self.suggestions = tuple(suggestions)
        message = f"unknown {self.kind} '{name}'"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(message, offset)


class UnknownStyle(UnknownRenderable):
    kind = "style"


class UnknownFrame(UnknownRenderable):
    kind = "frame"


class UnknownBadge(UnknownRenderable):
    kind = "badge"


class UnknownComponent(UnknownRenderable):
    kind = "component"


class UnknownSeparator(UnknownRenderable):
    kind = "separator"


class UnknownPartial(UnknownRenderable):
    kind = "partial"


class UnknownNamespace(UnknownRenderable):
    kind = "namespace"


class UnknownPrimitive(UnknownRenderable):
    kind = "shields type"


class ContextMismatch(ResolutionError):
    """
    A renderable that exists but is not valid in the requested context.

    Attributes:
        name: The attempted name
        declared: Context kinds the renderable supports
        requested: The context it was requested in
        alternatives: Same-kind names valid in the requested context
    """

    def __init__(
        self,
        name: str,
        declared: Sequence[str],
        requested: str,
        alternatives: Sequence[str] = (),
        offset: Optional[int] = None,
    ):
        self.name = name
        self.declared = tuple(declared)
        self.requested = requested
        self.alternatives = tuple(alternatives)
        message = (
            f"'{name}' is valid in [{', '.join(self.declared)}] "
            f"but was used in {requested}"
        )
        if self.alternatives:
            message += f" (try: {', '.join(self.alternatives)})"
        super().__init__(message, offset)


# Semantic -------------------------------------------------------------------


class SemanticError(MdfxError):
    pass


class UnsupportedChar(SemanticError):
    def __init__(self, kind: str, char: str, offset: Optional[int] = None):
        self.kind = kind
        self.char = char
        super().__init__(f"{kind} does not support character {char!r}", offset)


class InvalidParameterValue(SemanticError):
    def __init__(self, param: str, value: str, reason: str = "", offset: Optional[int] = None):
        self.param = param
        self.value = value
        self.reason = reason
        message = f"invalid value {value!r} for '{param}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, offset)


# Expansion ------------------------------------------------------------------


class ExpansionError(MdfxError):
    pass


class MissingRequiredArg(ExpansionError):
    def __init__(self, component: str, index: int, offset: Optional[int] = None):
        self.component = component
        self.index = index
        super().__init__(
            f"component '{component}' requires argument ${index}", offset
        )


class ComponentShapeMismatch(ExpansionError):
    def __init__(self, component: str, self_closing: bool, offset: Optional[int] = None):
        self.component = component
        self.self_closing = self_closing
        if self_closing:
            message = f"component '{component}' is self-closing: use {{{{ui:{component}/}}}}"
        else:
            message = (
                f"component '{component}' takes content: "
                f"use {{{{ui:{component}}}}}...{{{{/ui}}}}"
            )
        super().__init__(message, offset)


class ExpansionLimitExceeded(ExpansionError):
    """
    Raised when nesting depth or the total number of expansions passes
    its configured cap.

    Attributes:
        limit: The cap that was exceeded
        what: "depth" or "count"
    """

    def __init__(self, limit: int, what: str = "depth", offset: Optional[int] = None):
        self.limit = limit
        self.what = what
        super().__init__(f"expansion {what} limit of {limit} exceeded", offset)


# Backend / configuration ----------------------------------------------------


class BackendError(MdfxError):
    """Wraps whatever a renderer raised; the original is ``__cause__``"""

    def __init__(self, cause: BaseException, offset: Optional[int] = None):
        self.cause = cause
        super().__init__(f"renderer failed: {cause}", offset)


class ConfigurationError(MdfxError):
    pass
