"""Logging helpers used by the porter command line.

Diagnostics go through the standard ``logging`` hierarchy under the ``porter``
logger and are rendered on stderr by a ``rich.logging.RichHandler``. User-facing
output (help, results, faults) never goes through logging; it is written by
``porter.console.Console``.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

PROJECT_PREFIX = "porter"

LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "detailed": logging.DEBUG,
}


class ThirdPartyPrefixFilter(logging.Filter):
    """Annotate records from other libraries with a short "[name]" prefix."""

    def filter(self, record):
        if not record.name.startswith(PROJECT_PREFIX):
            record.prefix = f"[{record.name.split('.')[0]}] "
        else:
            record.prefix = ""
        return True


def config_console_handler(level=logging.WARNING, *, color=True, stream=None):
    """Create the RichHandler used for console diagnostics.

    Args:
        level: Minimum level written by the handler.
        color: Enable color output when True.
        stream: File-like object to write to; stderr when omitted.

    Returns:
        RichHandler: handler ready to be attached to the ``porter`` logger.
    """
    console = Console(
        file=stream,
        stderr=stream is None,
        color_system="auto" if color else None,
        highlight=False,
    )
    detailed = level <= logging.DEBUG
    handler = RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=detailed,
        enable_link_path=detailed,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(
        "%(prefix)s%(message)s" if not detailed else "%(name)s: %(prefix)s%(message)s"
    ))
    handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def configure(verbosity="normal", *, color=True, stream=None):
    """Install (or replace) the console handler on the ``porter`` logger.

    Args:
        verbosity: One of "quiet", "normal" or "detailed" (case-insensitive).
        color: Enable color output when True.
        stream: Optional destination stream, stderr by default.

    Returns:
        Logger: the configured ``porter`` logger.
    """
    level = LEVELS.get(str(verbosity).lower(), logging.WARNING)
    logger = logging.getLogger(PROJECT_PREFIX)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(config_console_handler(level, color=color, stream=stream))
    logger.setLevel(level)
    return logger


__all__ = (
    "PROJECT_PREFIX",
    "LEVELS",
    "ThirdPartyPrefixFilter",
    "config_console_handler",
    "configure",
)
