"""Where ``spend_analysis`` log records go.

Every module logs through ``get_logger("spend_analysis.<module>")``. Until an
application opts in, those records stop at a ``NullHandler`` on the
``"spend_analysis"`` logger, so importing the package never prints anything.

The CLI opts in by calling :func:`configure_logging` once at startup, which
sends records to stderr. Stdout stays reserved for the report itself, which
is why the default threshold is ``WARNING`` (per-input failures) rather than
``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "spend_analysis"
_CONFIGURED = False

LOG_LEVEL_ENV = "SPEND_ANALYSIS_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _parse_level(level: int | str | None) -> int:
    # None defers to the environment; unknown names degrade to WARNING.
    if isinstance(level, int):
        return level
    if level is None:
        env_val = os.getenv(LOG_LEVEL_ENV)
        return _parse_level(env_val) if env_val else logging.WARNING
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.WARNING


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send package records to ``stream`` (stderr by default).

    ``level`` accepts a number or a name such as ``"debug"``; when omitted,
    ``$SPEND_ANALYSIS_LOG_LEVEL`` is consulted. Only the first call has an
    effect.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
