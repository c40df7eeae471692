"""
mdfx - Template-macro compiler for decorated markdown

Core engine: scanner, tag parser, registry, component expander, processor.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .errors import MdfxError
from .processor import Processor
from .registry import Registry
from .renderers import PlainTextRenderer, ShieldsRenderer, SvgRenderer, renderer_create
from .diagnostics import error_format
from .log import LOG, state_connectToLogger

__all__ = [
    "MdfxError",
    "Processor",
    "Registry",
    "PlainTextRenderer",
    "ShieldsRenderer",
    "SvgRenderer",
    "renderer_create",
    "error_format",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
