"""Logging for ``takeout_wrapped``.

Every module logs through a child of the ``takeout_wrapped`` logger obtained
with :func:`get_logger`. Until an entry point calls :func:`configure_logging`
that tree only has a ``NullHandler``, so importing the package as a library
prints nothing. The CLI configures it once at startup; the level comes from
the command environment (``TAKEOUT_WRAPPED_LOG_LEVEL``) unless passed in.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_ROOT_NAME = "takeout_wrapped"
_LEVEL_ENV = "TAKEOUT_WRAPPED_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def parse_level(level: int | str | None) -> int:
    """Resolve ``level`` to a numeric logging level.

    Accepts ints, numeric strings and level names. ``None`` (or an unknown
    name) falls back to ``$TAKEOUT_WRAPPED_LOG_LEVEL`` and then ``INFO``.
    """

    if isinstance(level, int):
        return level
    for candidate in (level, os.getenv(_LEVEL_ENV)):
        resolved = _from_name(candidate)
        if resolved is not None:
            return resolved
    return logging.INFO


def _from_name(value: str | None) -> int | None:
    if not value:
        return None
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = getattr(logging, name, None)
    return numeric if isinstance(numeric, int) else None


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send ``takeout_wrapped`` log records to ``stream`` (stderr by default).

    Only the first call has an effect. It swaps the placeholder
    ``NullHandler`` for one ``StreamHandler`` at ``parse_level(level)`` and
    stops records from reaching the root logger, so an application that has
    its own root handlers does not print them twice.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    root = logging.getLogger(_ROOT_NAME)
    for existing in [h for h in root.handlers if isinstance(h, logging.NullHandler)]:
        root.removeHandler(existing)

    resolved = parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    root.setLevel(resolved)
    root.addHandler(handler)
    root.propagate = False
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger ``name``; output stays silent until configured."""

    root = logging.getLogger(_ROOT_NAME)
    if not _CONFIGURED and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "parse_level"]
