"""Locate known export members inside a Takeout archive and read them as text.

Member layout:

- transactions: any ``Google transactions/transactions_*.csv`` member
  (the suffix varies per export);
- everything else by exact path, see :data:`CHANNEL_PATHS`.

Members are read concurrently on a small thread pool and the result is
assembled only after every issued read has finished. A missing channel is not
an error; an archive with none of them is.
"""

from __future__ import annotations

import io
import zipfile
import zlib
from concurrent.futures import ThreadPoolExecutor
from os import PathLike
from pathlib import Path

from .config import Settings
from .errors import ArchiveUnreadableError, NoRecognizedDataError
from .json_parser import strip_anti_hijacking_prefix
from .logging_setup import get_logger
from .models import Channel, RawExport

TRANSACTIONS_DIR = "Google transactions/"
TRANSACTIONS_PREFIX = "transactions_"
TRANSACTIONS_SUFFIX = ".csv"

CHANNEL_PATHS: dict[Channel, str] = {
    Channel.GROUP_EXPENSES: "Google Pay/Group expenses/Group expenses.json",
    Channel.CASHBACK_REWARDS: "Google Pay/Rewards earned/Cashback rewards.csv",
    Channel.VOUCHER_REWARDS: "Google Pay/Rewards earned/Voucher rewards.json",
    Channel.REMITTANCES: (
        "Google Pay/Money remittances and requests/Money remittances and requests.csv"
    ),
}

_logger = get_logger("takeout_wrapped.archive")


def _find_transactions_member(names: list[str]) -> str | None:
    needle = TRANSACTIONS_DIR + TRANSACTIONS_PREFIX
    for name in names:
        if needle in name and name.endswith(TRANSACTIONS_SUFFIX):
            return name
    return None


def locate_members(names: list[str]) -> dict[Channel, str]:
    """Map each recognized channel to the member name that holds it."""

    found: dict[Channel, str] = {}
    tx_member = _find_transactions_member(names)
    if tx_member is not None:
        found[Channel.TRANSACTIONS] = tx_member
    present = set(names)
    for channel, path in CHANNEL_PATHS.items():
        if path in present:
            found[channel] = path
    return found


def _read_text(zf: zipfile.ZipFile, member: str) -> str:
    # ZipFile serializes access to the underlying file, so members can be
    # read from several threads at once.
    with zf.open(member) as fh:
        return fh.read().decode("utf-8-sig", errors="replace")


def extract_archive(data: bytes, *, read_workers: int | None = None) -> RawExport:
    """Return raw text per recognized channel.

    Raises
    ------
    ArchiveUnreadableError
        ``data`` is not a zip archive or a member cannot be decompressed.
    NoRecognizedDataError
        The archive holds none of the known members.
    """

    workers = read_workers or Settings.from_env().read_workers
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            members = locate_members(zf.namelist())
            if not members:
                raise NoRecognizedDataError()
            _logger.info(
                "archive: found %s", ", ".join(f"{c.value}={m}" for c, m in members.items())
            )
            with ThreadPoolExecutor(max_workers=min(workers, len(members))) as pool:
                futures = {c: pool.submit(_read_text, zf, m) for c, m in members.items()}
                # Join every read before assembling; the first failure is re-raised.
                texts = {c: f.result() for c, f in futures.items()}
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        EOFError,
        OSError,
        NotImplementedError,  # unsupported compression method
        RuntimeError,  # encrypted member
    ) as exc:
        raise ArchiveUnreadableError(f"Failed to extract ZIP file: {exc}") from exc

    raw: RawExport = {}
    for channel, text in texts.items():
        if channel is Channel.VOUCHER_REWARDS:
            text = strip_anti_hijacking_prefix(text)
        raw[channel] = text

    missing = [c.value for c in Channel if c not in raw]
    if missing:
        _logger.debug("archive: channels absent: %s", ", ".join(missing))
    return raw


def extract_archive_file(path: str | PathLike[str], **kwargs) -> RawExport:
    """Read ``path`` from disk and delegate to :func:`extract_archive`."""

    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ArchiveUnreadableError(f"Failed to read archive {path}: {exc}") from exc
    return extract_archive(data, **kwargs)


__all__ = [
    "CHANNEL_PATHS",
    "extract_archive",
    "extract_archive_file",
    "locate_members",
]
