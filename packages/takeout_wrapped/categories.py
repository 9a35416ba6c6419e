"""Spending categories and the description classifier.

The classifier is an ordered cascade; the first rule that matches wins:

1. Bank-transfer phrasing (self transfers, NEFT/IMPS/RTGS, "to HDFC Bank",
   masked account numbers) -> ``Bank Transfers``, regardless of any merchant
   keyword in the text.
2. Peer-transfer phrasing ("Sent ₹500", "Paid ₹X to ...", requests, splits,
   settlements). A merchant keyword anywhere in the text still wins its
   category; otherwise ``Transfers``.
3. Keyword scan over the taxonomy table in declaration order.
4. "to/from/paid" followed by a capitalized name -> ``Transfers``. This rule
   reads the original text because it relies on capitalization.
5. ``Others``.

The taxonomy table (category -> ordered lowercase substrings) is JSON. The
packaged table lives in ``data/categories.json``; a replacement can be pointed
to with ``TAKEOUT_WRAPPED_TAXONOMY_PATH``. It is loaded once per process.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from functools import cache
from importlib import resources
from os import PathLike
from pathlib import Path
from types import MappingProxyType
from typing import NamedTuple

from .config import Settings
from .currency import to_primary
from .logging_setup import get_logger
from .models import Activity, ActivityType, Money, Transaction

_logger = get_logger("takeout_wrapped.categories")


class Category(StrEnum):
    FOOD = "Food"
    GROCERIES = "Groceries"
    CLOTHING = "Clothing"
    ENTERTAINMENT = "Entertainment"
    E_COMMERCE = "E-commerce"
    TRAVEL_TRANSPORT = "Travel & Transport"
    UTILITIES_BILLS = "Utilities & Bills"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    INVESTMENTS = "Investments"
    TRANSFERS = "Transfers"
    BANK_TRANSFERS = "Bank Transfers"
    OTHERS = "Others"


# Category -> keywords, in table declaration order.
type Taxonomy = Mapping[Category, tuple[str, ...]]


# ---------------------------
# Taxonomy table
# ---------------------------


def parse_taxonomy(data: object) -> Taxonomy:
    """Validate a decoded taxonomy table and freeze it.

    Keys must be category labels; values lists of strings. Keywords are
    lowercased and blank keywords dropped (a blank substring would match
    every description).
    """

    if not isinstance(data, Mapping):
        raise ValueError("Taxonomy JSON must be an object mapping category -> keywords")
    table: dict[Category, tuple[str, ...]] = {}
    for name, keywords in data.items():
        try:
            category = Category(name)
        except ValueError:
            raise ValueError(f"Unknown category in taxonomy: {name!r}") from None
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise ValueError(f"Keywords for {name!r} must be a list of strings")
        table[category] = tuple(k.strip().lower() for k in keywords if k.strip())
    return MappingProxyType(table)


def load_taxonomy(path: str | PathLike[str] | None = None) -> Taxonomy:
    """Read a taxonomy table from ``path`` (default: the packaged table)."""

    if path is None:
        text = resources.files(__package__).joinpath("data", "categories.json").read_text("utf-8")
    else:
        text = Path(path).read_text(encoding="utf-8")
    return parse_taxonomy(json.loads(text))


@cache
def default_taxonomy() -> Taxonomy:
    path = Settings.from_env().taxonomy_path
    taxonomy = load_taxonomy(path)
    _logger.debug(
        "loaded taxonomy from %s (%d categories)", path or "package data", len(taxonomy)
    )
    return taxonomy


# ---------------------------
# Classifier
# ---------------------------

_BANK_TRANSFER_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"using bank account",  # "Paid ₹X using Bank Account XXXX1234"
        r"bank transfer",
        r"to\s+\w*bank",  # "to SBI Bank", "to HDFCBank"
        r"from\s+\w*bank",
        r"neft",
        r"imps",
        r"rtgs",
        r"upi.*bank",
        r"account\s+xxxx",
    )
)

_PEER_TRANSFER_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^sent\s+[₹$]",
        r"^received\s+[₹$]",
        r"^paid\s+[₹$].*to\s+[a-z]",
        r"request",
        r"split",
        r"settle",
    )
)

# Case-sensitive: matches a capitalized name.
_NAME_PATTERN = re.compile(r"(?:to|from|paid)\s+[A-Z][a-z]+")


def _keyword_category(lowered: str, taxonomy: Taxonomy) -> Category | None:
    for category, keywords in taxonomy.items():
        if category is Category.OTHERS:
            continue
        for keyword in keywords:
            if keyword in lowered:
                return category
    return None


def categorize(description: str | None, taxonomy: Taxonomy | None = None) -> Category:
    """Return the spending category for ``description``. Never fails."""

    text = description or ""
    table = default_taxonomy() if taxonomy is None else taxonomy
    lowered = text.lower()

    if any(p.search(text) for p in _BANK_TRANSFER_PATTERNS):
        return Category.BANK_TRANSFERS

    if any(p.search(text) for p in _PEER_TRANSFER_PATTERNS):
        return _keyword_category(lowered, table) or Category.TRANSFERS

    matched = _keyword_category(lowered, table)
    if matched is not None:
        return matched

    if _NAME_PATTERN.search(text):
        return Category.TRANSFERS

    return Category.OTHERS


# ---------------------------
# Aggregation
# ---------------------------


class SpendItem(NamedTuple):
    """A categorizable money movement drawn from transactions or activities."""

    description: str
    amount: Money
    source: str  # "transaction" | "activity"


@dataclass(slots=True)
class CategoryStats:
    count: int = 0
    total: Decimal = Decimal("0")


@dataclass(frozen=True, slots=True)
class CategoryShare:
    category: Category
    amount: Decimal
    count: int
    percentage: float


def category_stats(
    items: Iterable[SpendItem], taxonomy: Taxonomy | None = None
) -> dict[Category, CategoryStats]:
    """Count and primary-currency total per category, in first-seen order."""

    stats: dict[Category, CategoryStats] = {}
    for item in items:
        category = categorize(item.description, taxonomy)
        entry = stats.setdefault(category, CategoryStats())
        entry.count += 1
        entry.total += to_primary(item.amount)
    return stats


def spend_items(
    transactions: Iterable[Transaction], activities: Iterable[Activity] = ()
) -> list[SpendItem]:
    """Transactions plus outgoing activities (sent/paid with an amount)."""

    items = [SpendItem(t.description, t.amount, "transaction") for t in transactions]
    items.extend(
        SpendItem(a.title, a.amount, "activity")
        for a in activities
        if a.amount is not None
        and a.transaction_type in (ActivityType.SENT, ActivityType.PAID)
    )
    return items


def category_breakdown(
    transactions: Iterable[Transaction],
    activities: Iterable[Activity] = (),
    *,
    taxonomy: Taxonomy | None = None,
) -> list[CategoryShare]:
    """Per-category totals with share of the grand total, largest first."""

    stats = category_stats(spend_items(transactions, activities), taxonomy)
    grand_total = sum((s.total for s in stats.values()), Decimal("0"))
    shares = [
        CategoryShare(
            category=category,
            amount=s.total,
            count=s.count,
            percentage=float(s.total / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for category, s in stats.items()
    ]
    shares.sort(key=lambda s: s.amount, reverse=True)
    return shares


def items_in_category(
    items: Sequence[SpendItem], category: Category, taxonomy: Taxonomy | None = None
) -> list[SpendItem]:
    """Items classified as ``category``, largest primary-currency amount first."""

    picked = [i for i in items if categorize(i.description, taxonomy) is category]
    picked.sort(key=lambda i: to_primary(i.amount), reverse=True)
    return picked


__all__ = [
    "Category",
    "CategoryShare",
    "CategoryStats",
    "SpendItem",
    "Taxonomy",
    "categorize",
    "category_breakdown",
    "category_stats",
    "default_taxonomy",
    "items_in_category",
    "load_taxonomy",
    "parse_taxonomy",
    "spend_items",
]
