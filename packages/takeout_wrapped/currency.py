"""Currency text normalization, formatting and fixed-rate aggregation.

Export files encode money as ``"<CODE> <NUMBER>"`` (for example
``"INR 1,014.80"`` or ``"USD 25.00"``). Parsing never fails: anything that
cannot be read becomes zero in the detected (or primary) currency, and any
code other than the two supported ones is coerced to the primary currency.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .models import PRIMARY_CURRENCY, Currency, Money

# Fixed conversion rate, not configurable.
USD_TO_INR_RATE: Decimal = Decimal("83")

_SYMBOLS: dict[Currency, str] = {Currency.INR: "₹", Currency.USD: "$"}

# Leading decimal literal; trailing text is ignored.
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_CENTS = Decimal("0.01")


def parse_decimal(raw: str | None) -> Decimal | None:
    """Read the leading number of ``raw`` after dropping grouping commas."""

    if not raw:
        return None
    s = raw.replace(",", "").strip()
    m = _NUMBER_RE.match(s)
    if m is None:
        return None
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return None


def parse_currency(text: str | None) -> Money:
    """Parse ``"<CODE> <NUMBER>"`` into :class:`Money`.

    - Splits on the first whitespace run; the remainder is re-joined with
      single spaces when internally spaced.
    - Grouping commas are stripped before the decimal is read.
    - Missing or unparseable numbers yield a zero value.
    """

    if not text or not isinstance(text, str):
        return Money(Decimal("0"), PRIMARY_CURRENCY)

    parts = text.split(None, 1)
    if not parts:
        return Money(Decimal("0"), PRIMARY_CURRENCY)

    currency = Currency.coerce(parts[0])
    if len(parts) < 2:
        return Money(Decimal("0"), currency)

    remainder = " ".join(parts[1].split())
    value = parse_decimal(remainder)
    if value is None:
        return Money(Decimal("0"), currency)
    return Money(value, currency)


def to_primary(money: Money) -> Decimal:
    if money.currency is Currency.USD:
        return money.value * USD_TO_INR_RATE
    return money.value


def sum_in_primary(amounts: Iterable[Money]) -> Decimal:
    """Total of ``amounts`` in the primary currency."""

    return sum((to_primary(m) for m in amounts), Decimal("0"))


def format_currency(money: Money) -> str:
    """Render ``money`` back into the export encoding, e.g. ``"INR 1,014.80"``."""

    q = money.value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{money.currency.value} {q:,.2f}"


def _indian_grouping(integral: str) -> str:
    # 12345678 -> 1,23,45,678
    if len(integral) <= 3:
        return integral
    head, tail = integral[:-3], integral[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def display_currency(money: Money) -> str:
    """Human display with symbol and Indian digit grouping, e.g. ``"₹1,01,480.00"``."""

    q = money.value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if q < 0 else ""
    integral, _, frac = f"{abs(q):.2f}".partition(".")
    return f"{sign}{_SYMBOLS[money.currency]}{_indian_grouping(integral)}.{frac}"


__all__ = [
    "USD_TO_INR_RATE",
    "display_currency",
    "format_currency",
    "parse_currency",
    "parse_decimal",
    "sum_in_primary",
    "to_primary",
]
