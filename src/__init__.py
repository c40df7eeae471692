"""
mdfx - Template-macro compiler for decorated markdown

Expands {{tag}}...{{/tag}} markup into Unicode-styled text, decorative
frames and rendered badges.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .lib import Processor, Registry, MdfxError, error_format, LOG, state_connectToLogger

__all__ = [
    "Processor",
    "Registry",
    "MdfxError",
    "error_format",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
