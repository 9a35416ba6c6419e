"""Environment-driven settings.

Values come from process environment variables. Entry points load a local
``.env`` with ``python-dotenv`` first; library code never does.

- ``TAKEOUT_WRAPPED_LOG_LEVEL``: logging level (see ``logging_setup``).
- ``TAKEOUT_WRAPPED_TAXONOMY_PATH``: replacement category keyword table.
- ``TAKEOUT_WRAPPED_DEFAULT_YEAR``: initial year filter (``all`` or ``YYYY``).
- ``TAKEOUT_WRAPPED_READ_WORKERS``: concurrent archive member reads (1..16).
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

ALL_YEARS = "all"

_YEAR_RE = re.compile(r"^\d{4}$")
_DEFAULT_READ_WORKERS = 4
_MAX_READ_WORKERS = 16


def normalize_year(value: str | int | None) -> str | None:
    """Return ``"all"`` or a four-digit year string, ``None`` when invalid."""

    if value is None:
        return None
    s = str(value).strip().lower()
    if s == ALL_YEARS:
        return ALL_YEARS
    return s if _YEAR_RE.fullmatch(s) else None


def _resolve_read_workers(raw: str | None) -> int:
    try:
        n = int(raw) if raw else _DEFAULT_READ_WORKERS
    except ValueError:
        n = _DEFAULT_READ_WORKERS
    return max(1, min(n, _MAX_READ_WORKERS))


@dataclass(frozen=True, slots=True)
class Settings:
    log_level: str | None = None
    taxonomy_path: Path | None = None
    default_year: str = ALL_YEARS
    read_workers: int = _DEFAULT_READ_WORKERS

    @classmethod
    def from_env(cls) -> Settings:
        taxonomy = (os.getenv("TAKEOUT_WRAPPED_TAXONOMY_PATH") or "").strip()
        return cls(
            log_level=os.getenv("TAKEOUT_WRAPPED_LOG_LEVEL") or None,
            taxonomy_path=Path(taxonomy) if taxonomy else None,
            default_year=normalize_year(os.getenv("TAKEOUT_WRAPPED_DEFAULT_YEAR")) or ALL_YEARS,
            read_workers=_resolve_read_workers(os.getenv("TAKEOUT_WRAPPED_READ_WORKERS")),
        )


__all__ = ["ALL_YEARS", "Settings", "normalize_year"]
