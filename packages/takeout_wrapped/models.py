"""Canonical record types for a parsed payments export.

Every record is a frozen ``dataclass`` with explicit field order. Monetary
values are ``Decimal`` and timestamps are ``datetime`` (aware when the export
carried an offset, naive local time otherwise). Collections inside records are
tuples so a record, once built, cannot be patched in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum


class Channel(StrEnum):
    """The export categories recognized inside a Takeout archive."""

    TRANSACTIONS = "transactions"
    GROUP_EXPENSES = "groupExpenses"
    CASHBACK_REWARDS = "cashbackRewards"
    VOUCHER_REWARDS = "voucherRewards"
    REMITTANCES = "remittances"


# Raw text per channel as pulled out of the archive. Absent channels are
# simply missing keys.
type RawExport = dict[Channel, str]


class Currency(StrEnum):
    """The two supported currencies. ``INR`` is primary."""

    INR = "INR"
    USD = "USD"

    @classmethod
    def coerce(cls, code: str | None) -> Currency:
        """Return the matching member, or the primary currency for anything else."""

        if code and code.strip().upper() == cls.USD.value:
            return cls.USD
        return cls.INR


PRIMARY_CURRENCY = Currency.INR


@dataclass(frozen=True, slots=True)
class Money:
    value: Decimal
    currency: Currency = PRIMARY_CURRENCY


ZERO = Money(Decimal("0"))


class ExpenseState(StrEnum):
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"


class ItemState(StrEnum):
    PAID = "PAID_RECEIVED"
    UNPAID = "UNPAID"


class ActivityType(StrEnum):
    SENT = "sent"
    PAID = "paid"
    RECEIVED = "received"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Transaction:
    """One row of the Google transactions CSV."""

    time: datetime
    id: str
    description: str
    product: str
    method: str
    status: str
    amount: Money


@dataclass(frozen=True, slots=True)
class Activity:
    """A peer payment (sent, paid, received) as shown in account activity.

    ``amount`` is absent for entries that only mention a payment (requests,
    declined transfers).
    """

    time: datetime
    title: str
    amount: Money | None = None
    transaction_type: ActivityType = ActivityType.OTHER


@dataclass(frozen=True, slots=True)
class GroupExpenseItem:
    amount: Money
    state: ItemState
    payer: str


@dataclass(frozen=True, slots=True)
class GroupExpense:
    creation_time: datetime
    creator: str
    group_name: str
    total_amount: Money
    state: ExpenseState
    title: str
    items: tuple[GroupExpenseItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class CashbackReward:
    date: datetime
    currency: Currency
    amount: Decimal
    description: str


@dataclass(frozen=True, slots=True)
class Voucher:
    code: str
    details: str
    summary: str
    expiry_date: datetime | None = None


__all__ = [
    "Activity",
    "ActivityType",
    "CashbackReward",
    "Channel",
    "Currency",
    "ExpenseState",
    "GroupExpense",
    "GroupExpenseItem",
    "ItemState",
    "Money",
    "PRIMARY_CURRENCY",
    "RawExport",
    "Transaction",
    "Voucher",
    "ZERO",
]
