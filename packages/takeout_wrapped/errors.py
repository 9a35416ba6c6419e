"""Failure taxonomy for archive ingestion and parsing.

Only structural problems are raised. Content-level anomalies (an unknown
currency code, an unparseable amount, a row missing a required field) are
resolved where they are found by defaulting or discarding and never surface
here.
"""

from __future__ import annotations


class TakeoutWrappedError(Exception):
    """Base class for every failure raised by this package."""


class ArchiveUnreadableError(TakeoutWrappedError):
    """The uploaded bytes are not a readable archive (or the read was aborted)."""


class NoRecognizedDataError(TakeoutWrappedError):
    """The archive opened fine but holds none of the known export members."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or (
                "No Google Pay data found in the archive. Please upload a Google "
                "Takeout export that includes Google Pay data."
            )
        )


class StructuralParseError(TakeoutWrappedError):
    """Grammar-level CSV/JSON failure for one channel.

    ``message`` holds the joined parser messages; ``channel`` names the export
    channel when known so callers can tell the user which file is broken.
    """

    def __init__(self, message: str, *, channel: str | None = None) -> None:
        self.message = message
        self.channel = channel
        super().__init__(f"{channel}: {message}" if channel else message)


__all__ = [
    "ArchiveUnreadableError",
    "NoRecognizedDataError",
    "StructuralParseError",
    "TakeoutWrappedError",
]
