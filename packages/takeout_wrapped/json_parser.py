"""JSON channel parsers (group expenses, voucher rewards).

Google prefixes some JSON exports with ``)]}'`` so the payload cannot be
executed as a script. The prefix (plus one following newline or space) is
removed before decoding.

Record shapes are validated with loose pydantic models: unknown fields are
ignored, missing or non-text fields default to ``""``. Records missing their
required field (``creationTime`` / ``code``) are discarded; an expense whose
item list ends up empty is kept.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .currency import parse_currency
from .errors import StructuralParseError
from .logging_setup import get_logger
from .models import (
    Channel,
    ExpenseState,
    GroupExpense,
    GroupExpenseItem,
    ItemState,
    Voucher,
)
from .timestamps import parse_timestamp

T = TypeVar("T")

ANTI_HIJACKING_PREFIX = ")]}'"
_PREFIX_TERMINATORS: tuple[str, ...] = ("\r\n", "\n", " ")

_logger = get_logger("takeout_wrapped.json_parser")


def strip_anti_hijacking_prefix(text: str) -> str:
    """Remove a leading ``)]}'`` followed by a newline or a single space.

    Text without that exact prefix is returned unchanged.
    """

    if not text.startswith(ANTI_HIJACKING_PREFIX):
        return text
    rest = text[len(ANTI_HIJACKING_PREFIX) :]
    for term in _PREFIX_TERMINATORS:
        if rest.startswith(term):
            return rest[len(term) :]
    return text


# ---------------------------------------------------------------------------
# Loose record shapes
# ---------------------------------------------------------------------------


def _text(v: Any) -> str:
    if isinstance(v, str):
        return v.strip()
    if isinstance(v, bool) or v is None:
        return ""
    if isinstance(v, int | float):
        return str(v)
    return ""


def _timestamp(v: str | int | float | None) -> datetime | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int | float):
        # Epoch milliseconds.
        try:
            return datetime.fromtimestamp(v / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    return parse_timestamp(v)


class _LooseRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RawGroupExpenseItem(_LooseRecord):
    amount: str = ""
    state: str = ""
    payer: str = ""

    @field_validator("amount", "state", "payer", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _text(v)


class RawGroupExpense(_LooseRecord):
    creation_time: str | int | float | None = Field(None, alias="creationTime")
    creator: str = ""
    group_name: str = Field("", alias="groupName")
    total_amount: str = Field("", alias="totalAmount")
    state: str = ""
    title: str = ""
    items: list[Any] = []

    @field_validator("creator", "group_name", "total_amount", "state", "title", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("items", mode="before")
    @classmethod
    def _coerce_items(cls, v: Any) -> list[Any]:
        return v if isinstance(v, list) else []


class RawVoucher(_LooseRecord):
    code: str = ""
    details: str = ""
    summary: str = ""
    expiry_date: str | int | float | None = Field(None, alias="expiryDate")

    @field_validator("code", "details", "summary", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _text(v)


# ---------------------------------------------------------------------------
# Per-channel transforms
# ---------------------------------------------------------------------------


def _enum_or(enum_cls, raw: str, default):
    try:
        return enum_cls(raw.upper())
    except ValueError:
        return default


def _item_from_raw(raw: Any) -> GroupExpenseItem | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        item = RawGroupExpenseItem.model_validate(raw)
    except ValidationError:
        return None
    return GroupExpenseItem(
        amount=parse_currency(item.amount),
        state=_enum_or(ItemState, item.state, ItemState.UNPAID),
        payer=item.payer,
    )


def group_expense_from_raw(raw: Any) -> GroupExpense | None:
    """Map one group-expense object; ``None`` when ``creationTime`` is missing."""

    if not isinstance(raw, Mapping):
        return None
    try:
        rec = RawGroupExpense.model_validate(raw)
    except ValidationError:
        return None
    created = _timestamp(rec.creation_time)
    if created is None:
        return None
    items = tuple(i for i in (_item_from_raw(r) for r in rec.items) if i is not None)
    return GroupExpense(
        creation_time=created,
        creator=rec.creator,
        group_name=rec.group_name,
        total_amount=parse_currency(rec.total_amount),
        state=_enum_or(ExpenseState, rec.state, ExpenseState.ONGOING),
        title=rec.title,
        items=items,
    )


def voucher_from_raw(raw: Any) -> Voucher | None:
    """Map one voucher object; ``None`` when ``code`` is missing."""

    if not isinstance(raw, Mapping):
        return None
    try:
        rec = RawVoucher.model_validate(raw)
    except ValidationError:
        return None
    if not rec.code:
        return None
    return Voucher(
        code=rec.code,
        details=rec.details,
        summary=rec.summary,
        expiry_date=_timestamp(rec.expiry_date),
    )


# ---------------------------------------------------------------------------
# Generic parser
# ---------------------------------------------------------------------------


def parse_json(
    json_text: str | None,
    transform: Callable[[Any], T | None],
    *,
    wrapper_key: str | None = None,
    channel: str | None = None,
) -> list[T]:
    """Decode ``json_text`` into a list of records.

    Accepts a bare array, or an object holding the array under
    ``wrapper_key``. Any other document yields an empty list. Invalid JSON
    raises :class:`StructuralParseError` with the decoder's message.
    """

    if not json_text or not json_text.strip():
        return []

    cleaned = strip_anti_hijacking_prefix(json_text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise StructuralParseError(str(exc), channel=channel) from exc

    if isinstance(parsed, list):
        elements = parsed
    elif isinstance(parsed, Mapping) and wrapper_key is not None:
        inner = parsed.get(wrapper_key)
        elements = inner if isinstance(inner, list) else []
    else:
        elements = []

    out: list[T] = []
    for el in elements:
        record = transform(el)
        if record is not None:
            out.append(record)

    discarded = len(elements) - len(out)
    if discarded:
        _logger.debug("%s: discarded %d of %d records", channel or "json", discarded, len(elements))
    return out


def parse_group_expenses_json(json_text: str | None) -> list[GroupExpense]:
    return parse_json(
        json_text,
        group_expense_from_raw,
        wrapper_key="groupExpenses",
        channel=Channel.GROUP_EXPENSES.value,
    )


def parse_voucher_rewards_json(json_text: str | None) -> list[Voucher]:
    return parse_json(
        json_text,
        voucher_from_raw,
        wrapper_key="vouchers",
        channel=Channel.VOUCHER_REWARDS.value,
    )


__all__ = [
    "ANTI_HIJACKING_PREFIX",
    "RawGroupExpense",
    "RawGroupExpenseItem",
    "RawVoucher",
    "group_expense_from_raw",
    "parse_group_expenses_json",
    "parse_json",
    "parse_voucher_rewards_json",
    "strip_anti_hijacking_prefix",
    "voucher_from_raw",
]
