"""Parsed snapshot assembly and the year-scoped view.

A :class:`ParsedData` snapshot bundles the four parsed collections. It is
frozen and holds tuples, so it is replaced wholesale rather than patched.
No cross-channel checks are made (a cashback row need not reference a
transaction).

Year filtering keeps transactions, group expenses and cashback rewards whose
timestamp falls in the requested calendar year on the local clock. Vouchers
are never filtered.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo

from .config import ALL_YEARS, normalize_year
from .csv_parser import parse_cashback_rewards_csv, parse_transactions_csv
from .json_parser import parse_group_expenses_json, parse_voucher_rewards_json
from .logging_setup import get_logger
from .models import CashbackReward, Channel, GroupExpense, RawExport, Transaction, Voucher
from .timestamps import local_year

# "all" or a four-digit year such as "2024".
type YearFilter = str

_logger = get_logger("takeout_wrapped.snapshot")


@dataclass(frozen=True, slots=True)
class ParsedData:
    transactions: tuple[Transaction, ...] = ()
    group_expenses: tuple[GroupExpense, ...] = ()
    cashback_rewards: tuple[CashbackReward, ...] = ()
    voucher_rewards: tuple[Voucher, ...] = ()

    def counts(self) -> dict[str, int]:
        return {
            Channel.TRANSACTIONS.value: len(self.transactions),
            Channel.GROUP_EXPENSES.value: len(self.group_expenses),
            Channel.CASHBACK_REWARDS.value: len(self.cashback_rewards),
            Channel.VOUCHER_REWARDS.value: len(self.voucher_rewards),
        }


def assemble_parsed_data(raw: RawExport) -> ParsedData:
    """Parse every channel present in ``raw`` into one snapshot.

    Absent channels become empty collections. A structural failure in any
    channel propagates as :class:`~takeout_wrapped.errors.StructuralParseError`.
    """

    data = ParsedData(
        transactions=tuple(parse_transactions_csv(raw.get(Channel.TRANSACTIONS))),
        group_expenses=tuple(parse_group_expenses_json(raw.get(Channel.GROUP_EXPENSES))),
        cashback_rewards=tuple(parse_cashback_rewards_csv(raw.get(Channel.CASHBACK_REWARDS))),
        voucher_rewards=tuple(parse_voucher_rewards_json(raw.get(Channel.VOUCHER_REWARDS))),
    )
    _logger.info("assembled snapshot: %s", data.counts())
    return data


def filter_by_year(data: ParsedData, year: YearFilter, *, tz: tzinfo | None = None) -> ParsedData:
    """Return the view of ``data`` restricted to calendar ``year``.

    ``"all"`` returns ``data`` itself (callers must not mutate it). ``tz`` is
    the local zone used to read aware timestamps; ``None`` means the system
    zone.
    """

    normalized = normalize_year(year)
    if normalized is None:
        raise ValueError(f"year filter must be 'all' or a four-digit year, got {year!r}")
    if normalized == ALL_YEARS:
        return data

    target = int(normalized)
    return ParsedData(
        transactions=tuple(t for t in data.transactions if local_year(t.time, tz) == target),
        group_expenses=tuple(
            g for g in data.group_expenses if local_year(g.creation_time, tz) == target
        ),
        cashback_rewards=tuple(
            r for r in data.cashback_rewards if local_year(r.date, tz) == target
        ),
        voucher_rewards=data.voucher_rewards,
    )


def available_years(data: ParsedData, *, tz: tzinfo | None = None) -> list[str]:
    """Distinct years present in the filterable channels, newest first."""

    years = {local_year(t.time, tz) for t in data.transactions}
    years.update(local_year(g.creation_time, tz) for g in data.group_expenses)
    years.update(local_year(r.date, tz) for r in data.cashback_rewards)
    return [str(y) for y in sorted(years, reverse=True)]


__all__ = [
    "ParsedData",
    "YearFilter",
    "assemble_parsed_data",
    "available_years",
    "filter_by_year",
]
