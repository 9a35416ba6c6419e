"""CSV channel parsers (transactions, cashback rewards).

Parsing follows RFC 4180 via the stdlib :mod:`csv` module in strict mode so
malformed quoting is reported rather than guessed at. Two kinds of problems are
kept apart:

- grammar-level defects (bad quoting/escaping) abort the whole parse with one
  :class:`~takeout_wrapped.errors.StructuralParseError` whose message joins
  every defect found;
- content-level defects (a row missing a required field) drop that row
  silently. Drop counts are only logged at DEBUG.
"""

from __future__ import annotations

import csv
from collections.abc import Callable, Iterator
from decimal import Decimal
from io import StringIO
from typing import TypeVar

from .currency import parse_currency, parse_decimal
from .errors import StructuralParseError
from .logging_setup import get_logger
from .models import CashbackReward, Channel, Currency, Transaction
from .timestamps import parse_timestamp

T = TypeVar("T")

# A header-bound row: column name -> cell text ("" when the row is short).
type Row = dict[str, str]

_logger = get_logger("takeout_wrapped.csv_parser")


def _iter_rows(csv_text: str, errors: list[str]) -> Iterator[Row]:
    reader = csv.reader(StringIO(csv_text, newline=""), strict=True)
    header: list[str] | None = None
    while True:
        try:
            cells = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            # The reader resets on the next call and resumes at the next line.
            errors.append(f"{exc} (line {reader.line_num})")
            continue
        if all(not c.strip() for c in cells):
            continue
        if header is None:
            header = [c.strip() for c in cells]
            header[0] = header[0].lstrip("\ufeff")
            continue
        # Short rows pad with "", extra cells are ignored.
        yield {name: (cells[i] if i < len(cells) else "") for i, name in enumerate(header)}


def parse_csv(
    csv_text: str | None,
    transform: Callable[[Row], T | None],
    *,
    channel: str | None = None,
) -> list[T]:
    """Parse ``csv_text`` and map each row through ``transform``.

    ``transform`` returns a typed record or ``None`` to discard the row.
    Empty or whitespace-only input yields an empty list.
    """

    if not csv_text or not csv_text.strip():
        return []

    errors: list[str] = []
    rows = list(_iter_rows(csv_text, errors))
    if errors:
        raise StructuralParseError("CSV parsing error: " + ", ".join(errors), channel=channel)

    out: list[T] = []
    for row in rows:
        record = transform(row)
        if record is not None:
            out.append(record)

    discarded = len(rows) - len(out)
    if discarded:
        _logger.debug("%s: discarded %d of %d rows", channel or "csv", discarded, len(rows))
    return out


def _cell(row: Row, name: str) -> str:
    return (row.get(name) or "").strip()


def transaction_from_row(row: Row) -> Transaction | None:
    """Map a transactions CSV row; rows without ``Time`` or ``ID`` are dropped."""

    tx_id = _cell(row, "ID")
    time = parse_timestamp(_cell(row, "Time"))
    if not tx_id or time is None:
        return None
    return Transaction(
        time=time,
        id=tx_id,
        description=_cell(row, "Description"),
        product=_cell(row, "Product"),
        method=_cell(row, "Method"),
        status=_cell(row, "Status"),
        amount=parse_currency(_cell(row, "Amount")),
    )


def cashback_from_row(row: Row) -> CashbackReward | None:
    """Map a cashback CSV row; rows without ``Date`` are dropped."""

    date = parse_timestamp(_cell(row, "Date"))
    if date is None:
        return None
    return CashbackReward(
        date=date,
        currency=Currency.coerce(_cell(row, "Currency")),
        amount=parse_decimal(_cell(row, "Amount")) or Decimal("0"),
        description=_cell(row, "Description"),
    )


def parse_transactions_csv(csv_text: str | None) -> list[Transaction]:
    return parse_csv(csv_text, transaction_from_row, channel=Channel.TRANSACTIONS.value)


def parse_cashback_rewards_csv(csv_text: str | None) -> list[CashbackReward]:
    return parse_csv(csv_text, cashback_from_row, channel=Channel.CASHBACK_REWARDS.value)


__all__ = [
    "Row",
    "cashback_from_row",
    "parse_cashback_rewards_csv",
    "parse_csv",
    "parse_transactions_csv",
    "transaction_from_row",
]
