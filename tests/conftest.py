"""Pytest configuration for test isolation.

Settings are read from ``TAKEOUT_WRAPPED_*`` environment variables and the
default taxonomy is cached per process. A developer shell (or ``.env``) could
leak either into a test, so every test starts from a clean environment and an
empty taxonomy cache, and the package logger is put back as it was.
"""

from __future__ import annotations

import io
import logging
import os
import zipfile
from collections.abc import Callable, Iterator, Mapping

import pytest

from takeout_wrapped import logging_setup
from takeout_wrapped.categories import default_taxonomy


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("TAKEOUT_WRAPPED_"):
            monkeypatch.delenv(key, raising=False)
    default_taxonomy.cache_clear()
    yield
    default_taxonomy.cache_clear()


@pytest.fixture(autouse=True)
def _restore_package_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    pkg = logging.getLogger("takeout_wrapped")
    handlers, level, propagate = list(pkg.handlers), pkg.level, pkg.propagate
    monkeypatch.setattr(logging_setup, "_CONFIGURED", logging_setup._CONFIGURED)
    yield
    pkg.handlers[:] = handlers
    pkg.setLevel(level)
    pkg.propagate = propagate


def _build_zip(members: Mapping[str, str | bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return buf.getvalue()


@pytest.fixture
def make_zip() -> Callable[[Mapping[str, str | bytes]], bytes]:
    """Build an in-memory zip archive from ``{member name: content}``."""

    return _build_zip
