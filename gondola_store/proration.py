"""Pro-rated credit for switching subscription plans mid-cycle."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from .catalog import SUBSCRIPTION_PLANS, SubscriptionPlan, find_plan, plan_rank
from .formatting import parse_instant

Number = Union[int, float]

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class SubscriptionSnapshot:
    plan_id: str
    start_date: datetime
    end_date: datetime


@dataclass(frozen=True)
class PlanChangeQuote:
    plan_id: str
    plan_cost: Number
    credit: Number
    final_cost: Number
    is_upgrade: bool
    remaining_days: int


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days from ``earlier`` to ``later``, rounded up; negative if reversed."""
    return math.ceil((later - earlier).total_seconds() / SECONDS_PER_DAY)


def remaining_days(end_date: datetime, now: datetime) -> int:
    return max(0, days_between(now, end_date))


def compute_unused_entitlement(
    start_date: datetime,
    end_date: datetime,
    monthly_entitlement: Number,
    now: datetime,
) -> Number:
    """Entitlement left unconsumed at ``now`` for a cycle from start to end.

    Used days are counted in whole days and the consumed share is floored, so
    the subscriber never loses a partially used day. ``now`` outside the cycle
    is not clamped. A cycle that does not end after it starts yields 0.
    """
    total_days = days_between(start_date, end_date)
    if total_days <= 0:
        return 0
    used_days = total_days - days_between(now, end_date)
    used = math.floor(monthly_entitlement * used_days / total_days)
    return monthly_entitlement - used


def is_upgrade(
    current_plan_id: str,
    plan_id: str,
    plans: Sequence[SubscriptionPlan] = SUBSCRIPTION_PLANS,
) -> bool:
    return plan_rank(plan_id, plans) > plan_rank(current_plan_id, plans)


def is_lower_tier(
    current_plan_id: str,
    plan_id: str,
    plans: Sequence[SubscriptionPlan] = SUBSCRIPTION_PLANS,
) -> bool:
    return plan_rank(plan_id, plans) < plan_rank(current_plan_id, plans)


def quote_plan_change(
    selected_plan_id: str,
    subscription: Optional[SubscriptionSnapshot] = None,
    now: Optional[datetime] = None,
    plans: Sequence[SubscriptionPlan] = SUBSCRIPTION_PLANS,
) -> PlanChangeQuote:
    """Price a plan selection, crediting the unused part of the current plan.

    Credit only applies to upgrades: downgrades and re-selecting the current
    plan pay the full monthly cost.
    """
    selected = find_plan(selected_plan_id, plans)
    plan_cost = selected.monthly_tokens
    if subscription is None:
        return PlanChangeQuote(selected.id, plan_cost, 0, plan_cost, False, 0)

    # Naive datetimes are read as UTC so they compare with the default clock.
    now = datetime.now(timezone.utc) if now is None else parse_instant(now)
    start_date = parse_instant(subscription.start_date)
    end_date = parse_instant(subscription.end_date)
    current = find_plan(subscription.plan_id, plans)
    upgrade = current.id != selected.id and is_upgrade(current.id, selected.id, plans)

    credit: Number = 0
    if upgrade:
        unused = compute_unused_entitlement(
            start_date,
            end_date,
            current.monthly_tokens,
            now,
        )
        if unused > 0:
            credit = unused

    return PlanChangeQuote(
        plan_id=selected.id,
        plan_cost=plan_cost,
        credit=credit,
        final_cost=max(0, plan_cost - credit),
        is_upgrade=upgrade,
        remaining_days=remaining_days(end_date, now),
    )
