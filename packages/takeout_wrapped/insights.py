"""Insight records handed to the presentation layer.

Insights are derived elsewhere from a year-scoped snapshot. This module only
fixes their shape: a tagged union keyed by ``type``, one payload model per
tag, validated with pydantic so a deriver cannot hand back a payload that does
not match its tag.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .snapshot import ParsedData, YearFilter


class InsightTone(StrEnum):
    FUNNY = "funny"
    HARD_HITTING = "hard-hitting"
    THOUGHTFUL = "thoughtful"
    SOCIAL = "social"
    WHOLESOME = "wholesome"


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DomainCollectorData(_Payload):
    total_domains: int
    total_renewals: int
    total_spent: float
    most_renewed: str | None
    renewal_count: int


class GroupChampionData(_Payload):
    reliability_score: float
    total_splits: int
    paid_count: int
    total_count: int


class VoucherHoarderData(_Payload):
    total_vouchers: int
    expired: int
    active: int
    waste_percentage: float


class SpendingTimelineData(_Payload):
    first_date: datetime
    last_date: datetime
    days_since: int
    years_since: str


class SplitPartnerData(_Payload):
    partner_name: str
    split_count: int


class RewardHunterData(_Payload):
    total_rewards: float
    reward_count: int
    avg_reward: float


class ExpensiveDayData(_Payload):
    date: datetime
    amount: float


class ResponsibleOneData(_Payload):
    created_count: int
    total_amount: float


class MoneyNetworkData(_Payload):
    people_count: int
    group_count: int
    people: tuple[str, ...]


class _InsightBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str
    message: str
    tone: InsightTone | None = None


class DomainCollectorInsight(_InsightBase):
    type: Literal["domain_collector"] = "domain_collector"
    data: DomainCollectorData


class GroupChampionInsight(_InsightBase):
    type: Literal["group_champion"] = "group_champion"
    data: GroupChampionData


class VoucherHoarderInsight(_InsightBase):
    type: Literal["voucher_hoarder"] = "voucher_hoarder"
    data: VoucherHoarderData


class SpendingTimelineInsight(_InsightBase):
    type: Literal["spending_timeline"] = "spending_timeline"
    data: SpendingTimelineData


class SplitPartnerInsight(_InsightBase):
    type: Literal["split_partner"] = "split_partner"
    data: SplitPartnerData


class RewardHunterInsight(_InsightBase):
    type: Literal["reward_hunter"] = "reward_hunter"
    data: RewardHunterData


class ExpensiveDayInsight(_InsightBase):
    type: Literal["expensive_day"] = "expensive_day"
    data: ExpensiveDayData


class ResponsibleOneInsight(_InsightBase):
    type: Literal["responsible_one"] = "responsible_one"
    data: ResponsibleOneData


class MoneyNetworkInsight(_InsightBase):
    type: Literal["money_network"] = "money_network"
    data: MoneyNetworkData


Insight = Annotated[
    DomainCollectorInsight
    | GroupChampionInsight
    | VoucherHoarderInsight
    | SpendingTimelineInsight
    | SplitPartnerInsight
    | RewardHunterInsight
    | ExpensiveDayInsight
    | ResponsibleOneInsight
    | MoneyNetworkInsight,
    Field(discriminator="type"),
]

# Derives insights from a year-scoped snapshot; supplied by the caller.
type InsightDeriver = Callable[[ParsedData, YearFilter], Sequence[Insight]]

_INSIGHT_LIST = TypeAdapter(list[Insight])


def validate_insights(records: Sequence[object]) -> tuple[Insight, ...]:
    """Validate deriver output (models or plain dicts) into typed insights."""

    return tuple(_INSIGHT_LIST.validate_python(list(records)))


def no_insights(data: ParsedData, year: YearFilter) -> Sequence[Insight]:
    return ()


__all__ = [
    "Insight",
    "InsightDeriver",
    "InsightTone",
    "no_insights",
    "validate_insights",
]
