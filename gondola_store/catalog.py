"""Storefront catalog: subscription plans, booster packs and token packages."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence, Tuple


class UnknownPlanError(KeyError):
    """Raised when a plan id is not part of the catalog."""


@dataclass(frozen=True)
class SubscriptionPlan:
    id: str
    name: str
    monthly_tokens: int
    streams: int
    movie_requests: int
    tv_requests: int
    support: str = "standard"
    downloads: bool = True
    popular: bool = False


@dataclass(frozen=True)
class BoosterPack:
    id: str
    name: str
    tokens: int
    description: str
    movie_requests: int = 0
    tv_requests: int = 0


@dataclass(frozen=True)
class TokenPackage:
    tokens: int
    price_usd: str
    bonus: int = 0

    @property
    def bonus_percent(self) -> int:
        return round(self.bonus / self.tokens * 100)

    @property
    def total_tokens(self) -> int:
        return self.tokens + self.bonus


# Ordered from lowest to highest tier; the index is the plan's rank.
SUBSCRIPTION_PLANS: Tuple[SubscriptionPlan, ...] = (
    SubscriptionPlan("standard", "Standard", 60, streams=1, movie_requests=1, tv_requests=1),
    SubscriptionPlan("duo", "Duo", 80, streams=2, movie_requests=2, tv_requests=1, popular=True),
    SubscriptionPlan("family", "Family", 120, streams=4, movie_requests=4, tv_requests=2),
    SubscriptionPlan(
        "ultimate",
        "Ultimate",
        250,
        streams=10,
        movie_requests=10,
        tv_requests=5,
        support="priority",
    ),
)

BOOSTER_PACKS: Tuple[BoosterPack, ...] = (
    BoosterPack("movie-booster-5", "Movie Pack", 50, "+5 movie requests", movie_requests=5),
    BoosterPack("tv-booster-3", "TV Pack", 60, "+3 TV show requests", tv_requests=3),
    BoosterPack(
        "mega-booster",
        "Mega Bundle",
        150,
        "+10 movies & +5 TV shows",
        movie_requests=10,
        tv_requests=5,
    ),
    BoosterPack(
        "ultra-booster",
        "Ultra Bundle",
        300,
        "+20 movies & +10 TV shows",
        movie_requests=20,
        tv_requests=10,
    ),
)

TOKEN_PACKAGES: Tuple[TokenPackage, ...] = (
    TokenPackage(70, "7.00"),
    TokenPackage(120, "12.00"),
    TokenPackage(200, "20.00", bonus=10),
    TokenPackage(300, "30.00", bonus=15),
    TokenPackage(1200, "120.00", bonus=96),
    TokenPackage(2500, "250.00", bonus=250),
)

PER_PAGE_OPTIONS: Tuple[int, ...] = (5, 10, 25, 50)


def find_plan(
    plan_id: str,
    plans: Sequence[SubscriptionPlan] = SUBSCRIPTION_PLANS,
) -> SubscriptionPlan:
    for plan in plans:
        if plan.id == plan_id:
            return plan
    raise UnknownPlanError(plan_id)


def plan_rank(plan_id: str, plans: Sequence[SubscriptionPlan] = SUBSCRIPTION_PLANS) -> int:
    for index, plan in enumerate(plans):
        if plan.id == plan_id:
            return index
    raise UnknownPlanError(plan_id)


def find_token_package(tokens: int) -> Optional[TokenPackage]:
    for package in TOKEN_PACKAGES:
        if package.tokens == tokens:
            return package
    return None


def catalog_payload() -> Dict[str, Any]:
    return {
        "plans": [dict(asdict(plan), rank=rank) for rank, plan in enumerate(SUBSCRIPTION_PLANS)],
        "booster_packs": [asdict(pack) for pack in BOOSTER_PACKS],
        "token_packages": [
            dict(asdict(package), bonus_percent=package.bonus_percent)
            for package in TOKEN_PACKAGES
        ],
        "per_page_options": list(PER_PAGE_OPTIONS),
    }
