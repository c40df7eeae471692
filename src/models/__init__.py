"""
Models package for mdfx

Contains data structures and type definitions for the expansion engine
and the command-line pipeline.
"""

from .state import ProgramState, pipeline
from .spans import SourceSpan, SpanKind
from .tag import Tag, TagKind, CloserPolicy, ParsedTag, ClosingTag, OpenTagEntry
from .context import ContextKind, EvalContext
from .primitive import Primitive, Swatch, Divider, Tech, Status, TwoTone
from .assets import InlineMarkdown, FileAsset, RenderedAsset

__all__ = [
    "ProgramState",
    "pipeline",
    "SourceSpan",
    "SpanKind",
    "Tag",
    "TagKind",
    "CloserPolicy",
    "ParsedTag",
    "ClosingTag",
    "OpenTagEntry",
    "ContextKind",
    "EvalContext",
    "Primitive",
    "Swatch",
    "Divider",
    "Tech",
    "Status",
    "TwoTone",
    "InlineMarkdown",
    "FileAsset",
    "RenderedAsset",
]
