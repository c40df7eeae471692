"""
Verbosity-gated logging on Loguru.

Engine code (scanner, registry, processor) calls LOG() freely. A message
is emitted only when a state with a sufficient ``verbosity`` has been
connected in the current context, so embedding the Processor in another
program stays silent unless that program opts in.

Verbosity maps onto Loguru levels:
    1  INFO    what the command did (files, totals)
    2  DEBUG   configuration, registry sizes, per-file progress
    3  TRACE   every dispatch, push and pop of the expansion engine

Usage:
    from mdfx.lib.log import LOG, state_connectToLogger

    state_connectToLogger(state)
    LOG("Wrote 3 files", level=1)
    LOG("push ui:header at depth 2", level=3)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

_program_state: ContextVar[Optional[Any]] = ContextVar('mdfx_state', default=None)

LEVELS = {1: "INFO", 2: "DEBUG", 3: "TRACE"}

logger_format = (
    "<green>{time:HH:mm:ss.SSS}</green> │ "
    "<level>{level: <5}</level> │ "
    "<magenta>{extra[stage]: <8}</magenta> │ "
    "<cyan>{module}.{function}</cyan>:<cyan>{line}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.configure(extra={"stage": "mdfx"})
logger.add(sys.stderr, format=logger_format, level="TRACE")


def state_connectToLogger(state: Any) -> None:
    """
    Make ``state.verbosity`` govern LOG() calls in this context.

    Args:
        state: Object with a ``verbosity`` attribute, or None to silence
               logging again
    """
    _program_state.set(state)


def verbosity_get() -> int:
    """Verbosity of the connected state; 0 when nothing is connected"""
    state = _program_state.get()
    return getattr(state, 'verbosity', 0) if state is not None else 0


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Emit ``message`` when the connected verbosity is at least ``level``.

    Args:
        message: Text to log
        level: 1 (normal), 2 (verbose) or 3 (trace)
        **kwargs: Extra fields bound onto the record (e.g. stage="write")
    """
    if verbosity_get() < level:
        return
    name = LEVELS.get(level, "TRACE")
    logger.bind(**kwargs).opt(depth=1).log(name, message)
