"""DataStore: owner of the current raw export, snapshot and year filter.

Lifecycle::

    EMPTY --set_raw_data--> RAW_LOADED --parse_raw_data--> PARSED
                                  |                           |
                                  +------- failure ------> ERROR
    any --reset--> EMPTY

A failed parse records a message and moves to ``ERROR`` but keeps the last
good snapshot, so stale-but-valid data stays viewable. Changing the year never
touches the snapshot; the filtered view is recomputed from it on every read
and insights are re-derived synchronously.

Instances are independent; there is no module-level store. Callers serialize
``set_raw_data`` and ``parse_raw_data`` per upload cycle.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import tzinfo
from enum import StrEnum

from .archive import extract_archive
from .config import Settings, normalize_year
from .errors import TakeoutWrappedError
from .insights import Insight, InsightDeriver, no_insights, validate_insights
from .logging_setup import get_logger
from .models import RawExport
from .snapshot import ParsedData, YearFilter, assemble_parsed_data, filter_by_year

_logger = get_logger("takeout_wrapped.store")

type Listener = Callable[[DataStore], None]


class State(StrEnum):
    EMPTY = "empty"
    RAW_LOADED = "raw_loaded"
    PARSED = "parsed"
    ERROR = "error"


class DataStore:
    """In-memory export state with year-scoped accessors."""

    def __init__(
        self,
        *,
        deriver: InsightDeriver = no_insights,
        default_year: YearFilter | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        year = normalize_year(default_year) if default_year is not None else None
        self._default_year: YearFilter = year or Settings.from_env().default_year
        self._deriver = deriver
        self._tz = tz
        self._listeners: list[Listener] = []

        self._state = State.EMPTY
        self._raw: RawExport | None = None
        self._parsed: ParsedData | None = None
        self._year: YearFilter = self._default_year
        self._error: str | None = None
        self._insights: tuple[Insight, ...] = ()
        self._loading = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def raw_data(self) -> RawExport | None:
        return self._raw

    @property
    def parsed_data(self) -> ParsedData | None:
        return self._parsed

    @property
    def selected_year(self) -> YearFilter:
        return self._year

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def insights(self) -> tuple[Insight, ...]:
        return self._insights

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def filtered_data(self) -> ParsedData | None:
        """Year-scoped view of the snapshot, recomputed on every access."""

        if self._parsed is None:
            return None
        return filter_by_year(self._parsed, self._year, tz=self._tz)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(store)`` after every change; returns an unsubscribe."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def set_raw_data(self, raw: RawExport) -> None:
        """Hold ``raw`` for a later :meth:`parse_raw_data`; nothing is parsed yet."""

        self._raw = dict(raw)
        self._state = State.RAW_LOADED
        _logger.info("raw data loaded: %s", ", ".join(c.value for c in self._raw))
        self._notify()

    def parse_raw_data(self) -> None:
        """Parse the held raw export into a new snapshot.

        Insights for the selected year are derived before anything is
        committed. On any failure (parse or deriver) the store enters
        ``ERROR`` with a message; the previous snapshot and insights are kept.
        """

        if self._raw is None:
            return
        try:
            parsed = assemble_parsed_data(self._raw)
            insights = self._derive(parsed, self._year)
        except TakeoutWrappedError as exc:
            _logger.warning("parse failed: %s", exc)
            self._fail(str(exc))
            return
        except Exception as exc:  # noqa: BLE001 - surfaced as store state
            _logger.exception("unexpected failure while parsing or deriving insights")
            self._fail(str(exc) or "Failed to parse data")
            return

        self._parsed = parsed
        self._insights = insights
        self._error = None
        self._state = State.PARSED
        self._notify()

    def set_selected_year(self, year: YearFilter | int) -> None:
        """Select ``"all"`` or a four-digit year and re-derive dependent views.

        A deriver failure leaves the new year selected with no insights; the
        snapshot and state are untouched.
        """

        normalized = normalize_year(year)
        if normalized is None:
            raise ValueError(f"year filter must be 'all' or a four-digit year, got {year!r}")
        self._year = normalized
        if self._parsed is None:
            self._insights = ()
        else:
            try:
                self._insights = self._derive(self._parsed, normalized)
            except Exception:  # noqa: BLE001 - the view stays usable without insights
                _logger.exception("insight derivation failed for year %s", normalized)
                self._insights = ()
        self._notify()

    def reset(self) -> None:
        """Drop everything (used before a new archive upload)."""

        self._raw = None
        self._parsed = None
        self._error = None
        self._insights = ()
        self._year = self._default_year
        self._loading = False
        self._state = State.EMPTY
        _logger.info("store reset")
        self._notify()

    def load_archive(self, data: bytes) -> None:
        """Extract, hold and parse an uploaded archive in one step.

        Extraction failures leave the current snapshot in place and move the
        store to ``ERROR``; a readable archive replaces everything.
        """

        self._loading = True
        self._notify()
        try:
            raw = extract_archive(data)
        except TakeoutWrappedError as exc:
            _logger.warning("archive rejected: %s", exc)
            self._loading = False
            self._fail(str(exc))
            return

        self.reset()
        self.set_raw_data(raw)
        self.parse_raw_data()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fail(self, message: str) -> None:
        self._error = message
        self._state = State.ERROR
        self._notify()

    def _derive(self, parsed: ParsedData, year: YearFilter) -> tuple[Insight, ...]:
        _logger.debug("deriving insights for year %s", year)
        view = filter_by_year(parsed, year, tz=self._tz)
        return validate_insights(self._deriver(view, year))


__all__ = ["DataStore", "Listener", "State"]
