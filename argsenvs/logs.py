"""
argsenvs logging.

The package logs through the standard logging module under the "argsenvs"
logger and is silent by default (a NullHandler is attached, nothing propagates
unless the host configures logging). configure() installs a rich handler on
stderr, the same stream faults are rendered to.

Loggers
- argsenvs            package root
- argsenvs.registry   registrations, sink bookkeeping
- argsenvs.engine     phase boundaries, matches, env/default adoption, rejections

Values of silent options never reach a log record unmasked (see utils.mask).
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .utils import Unset, coalesce

logger = logging.getLogger("argsenvs")
logger.addHandler(logging.NullHandler())

_handler = None


def getLogger(name=Unset, /):
    """
    Return the package logger or one of its children ("engine", "registry", ...).
    """
    return logger if name is Unset else logger.getChild(name)


def configure(level=logging.INFO, /, *, console=Unset, trace=False):
    """
    Route argsenvs log records to a rich handler on stderr.

    Parameters
    - level: int | str, numeric level or level name ("DEBUG"); unknown names raise ValueError.
    - console: rich Console to write to; defaults to a stderr console.
    - trace: show timestamps and source paths.

    Calling configure() again replaces the handler it installed before.
    """
    global _handler

    if isinstance(level, str):
        try:
            level = logging.getLevelNamesMapping()[level.strip().upper()]
        except KeyError:
            raise ValueError("Unknown level: %r" % level) from None

    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = RichHandler(
        console=coalesce(console, Console(stderr=True)),
        level=level,
        show_time=trace,
        show_path=trace,
        markup=False,
        rich_tracebacks=True,
    )
    _handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(level)
    return logger


__all__ = (
    "getLogger",
    "configure",
)
