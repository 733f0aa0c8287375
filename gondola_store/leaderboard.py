"""Community leaderboards: top tippers, top traders and top token holders."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

from .pagination import PageState, compute_page_window, page_count, page_labels, page_slice, page_state

Number = Union[int, float]

LEADERBOARD_KINDS = ("tippers", "trades", "tokens")
ANONYMOUS = "Anonymous"


class InvalidLeaderboardRecord(ValueError):
    """Raised when a tip, trade or user record cannot be tallied."""


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: str
    username: str
    value: Number


def _user_id(record: Mapping[str, Any], name: str) -> str:
    value = record.get(name)
    if value is None or not str(value).strip():
        raise InvalidLeaderboardRecord(f"Record is missing '{name}'.")
    return str(value).strip()


def _username(record: Mapping[str, Any], name: str) -> str:
    value = record.get(name)
    if value is None or not str(value).strip():
        return ANONYMOUS
    return str(value).strip()


def _number(value: Any, name: str) -> Number:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise InvalidLeaderboardRecord(f"'{name}' must be a number.")
    if isinstance(value, (int, float)):
        number: Number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError as exc:
            raise InvalidLeaderboardRecord(f"'{name}' must be a number.") from exc
    if isinstance(number, float) and not math.isfinite(number):
        raise InvalidLeaderboardRecord(f"'{name}' must be a finite number.")
    return number


def _records(records: Iterable[Any]) -> Iterable[Mapping[str, Any]]:
    for record in records:
        if not isinstance(record, Mapping):
            raise InvalidLeaderboardRecord("Leaderboard records must be objects.")
        yield record


def _ranked(totals: Dict[str, List[Any]]) -> List[LeaderboardEntry]:
    # sorted() is stable, so ties keep first-seen order.
    ordered = sorted(totals.items(), key=lambda item: item[1][1], reverse=True)
    return [
        LeaderboardEntry(rank=index, user_id=user_id, username=username, value=total)
        for index, (user_id, (username, total)) in enumerate(ordered, start=1)
    ]


def top_tippers(tips: Iterable[Any]) -> List[LeaderboardEntry]:
    """Total completed tips (USD) per user."""
    totals: Dict[str, List[Any]] = {}
    for tip in _records(tips):
        if tip.get("status") != "completed":
            continue
        user_id = _user_id(tip, "userId")
        entry = totals.setdefault(user_id, [_username(tip, "username"), 0.0])
        entry[1] += float(_number(tip.get("amount"), "amount"))
    return _ranked(totals)


def top_traders(trades: Iterable[Any]) -> List[LeaderboardEntry]:
    """Tokens moved per user; a trade counts for both its sender and receiver."""
    totals: Dict[str, List[Any]] = {}
    for trade in _records(trades):
        tokens = _number(trade.get("tokens"), "tokens")
        for side in ("sender", "receiver"):
            user_id = _user_id(trade, f"{side}Id")
            entry = totals.setdefault(user_id, [_username(trade, f"{side}Username"), 0])
            entry[1] += tokens
    return _ranked(totals)


def top_token_holders(users: Iterable[Any]) -> List[LeaderboardEntry]:
    totals: Dict[str, List[Any]] = {}
    for user in _records(users):
        balance = _number(user.get("tokenBalance"), "tokenBalance")
        if balance <= 0:
            continue
        totals[_user_id(user, "id")] = [_username(user, "username"), balance]
    return _ranked(totals)


def build_leaderboard(kind: str, records: Iterable[Any]) -> List[LeaderboardEntry]:
    if kind == "tippers":
        return top_tippers(records)
    if kind == "trades":
        return top_traders(records)
    if kind == "tokens":
        return top_token_holders(records)
    raise InvalidLeaderboardRecord(f"Unknown leaderboard {kind!r}.")


@dataclass(frozen=True)
class LeaderboardPage:
    entries: List[LeaderboardEntry]
    state: PageState
    window: List[Any]
    total_entries: int
    per_page: int


def paginate_leaderboard(
    entries: Sequence[LeaderboardEntry],
    page_number: int,
    per_page: int,
    max_buttons: int = 5,
) -> LeaderboardPage:
    total_pages = page_count(len(entries), per_page)
    state = page_state(page_number, total_pages)
    return LeaderboardPage(
        entries=page_slice(entries, state.page, per_page),
        state=state,
        window=page_labels(compute_page_window(state.page, total_pages, max_buttons)),
        total_entries=len(entries),
        per_page=max(1, per_page),
    )
