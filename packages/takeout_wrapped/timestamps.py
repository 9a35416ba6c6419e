"""Timestamp normalization for export date strings.

Exports mix ISO-8601 (``2024-03-05T10:12:00.123Z``) with human renderings
such as ``Mar 5, 2024, 3:42:10 PM GMT+05:30`` (often with a narrow no-break
space before ``PM``). ISO is tried first; everything else goes through
``dateutil``.
"""

from __future__ import annotations

import re
from datetime import datetime

from dateutil import parser as date_parser

# dateutil reads "GMT+05:30" POSIX-style (as UTC-05:30). Dropping the zone
# name leaves a plain "+05:30" offset that parses with the intended sign.
_NAMED_OFFSET_RE = re.compile(r"\b(?:GMT|UTC)(?=\s*[+-]\d)")
_SPACES_RE = re.compile(r"[\u00a0\u2009\u202f]")


def parse_timestamp(raw: str | None) -> datetime | None:
    """Return a ``datetime`` for ``raw`` or ``None`` when it cannot be read."""

    if raw is None:
        return None
    s = _SPACES_RE.sub(" ", str(raw)).strip()
    if not s:
        return None
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    s = _NAMED_OFFSET_RE.sub("", s)
    try:
        return date_parser.parse(s)
    except (ValueError, OverflowError):
        return None


def local_year(ts: datetime, tz=None) -> int:
    """Calendar year of ``ts`` on the local clock.

    Aware timestamps are converted to ``tz`` (the system zone when ``None``);
    naive timestamps are already local.
    """

    if ts.tzinfo is None:
        return ts.year
    return ts.astimezone(tz).year


__all__ = ["local_year", "parse_timestamp"]
