"""Token transaction history: parsing, labelling and paging."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .formatting import fmt_timestamp, fmt_tokens, parse_instant
from .pagination import PageState, compute_page_window, page_count, page_labels, page_slice, page_state

TRANSACTION_TYPES = ("purchase", "redemption", "trade")
TRADE_DIRECTIONS = ("sent", "received")


class InvalidTransaction(ValueError):
    """Raised when a transaction record cannot be interpreted."""


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str
    created_at: datetime
    tokens: int = 0
    token_cost: int = 0
    direction: Optional[str] = None
    product_id: Optional[str] = None
    sender_username: Optional[str] = None
    receiver_username: Optional[str] = None


def _first_value(record: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return None


def _int_field(record: Mapping[str, Any], *names: str) -> int:
    value = _first_value(record, *names)
    if value is None:
        return 0
    # Amounts are whole tokens.
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidTransaction(f"'{names[0]}' must be a whole number of tokens.")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidTransaction(f"'{names[0]}' must be a whole number of tokens.") from exc


def _str_field(record: Mapping[str, Any], *names: str) -> Optional[str]:
    for name in names:
        value = record.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def parse_transaction(record: Mapping[str, Any]) -> Transaction:
    if not isinstance(record, Mapping):
        raise InvalidTransaction("Transaction must be an object.")

    tx_id = _str_field(record, "id")
    if tx_id is None:
        raise InvalidTransaction("Transaction is missing 'id'.")

    tx_type = record.get("type")
    if tx_type not in TRANSACTION_TYPES:
        raise InvalidTransaction(f"Unknown transaction type {tx_type!r}.")

    direction = record.get("direction")
    if tx_type == "trade" and direction not in TRADE_DIRECTIONS:
        raise InvalidTransaction("Trade transactions need a 'direction' of sent or received.")

    try:
        created_at = parse_instant(_first_value(record, "created_at", "createdAt"))
    except ValueError as exc:
        raise InvalidTransaction(str(exc)) from exc

    return Transaction(
        id=tx_id,
        type=tx_type,
        created_at=created_at,
        tokens=_int_field(record, "tokens"),
        token_cost=_int_field(record, "token_cost", "tokenCost"),
        direction=direction if tx_type == "trade" else None,
        product_id=_str_field(record, "product_id", "productId"),
        sender_username=_str_field(record, "sender_username", "senderUsername"),
        receiver_username=_str_field(record, "receiver_username", "receiverUsername"),
    )


def describe(tx: Transaction) -> str:
    if tx.type == "purchase":
        return f"Purchased {tx.tokens} tokens"
    if tx.type == "redemption":
        return f"Subscribed to {tx.product_id} plan"
    if tx.direction == "sent":
        return f"Sent to {tx.receiver_username or 'user'}"
    return f"Received from {tx.sender_username or 'user'}"


def token_delta(tx: Transaction) -> int:
    if tx.type == "purchase":
        return tx.tokens
    if tx.type == "redemption":
        return -tx.token_cost
    if tx.direction == "sent":
        return -tx.tokens
    return tx.tokens


def newest_first(transactions: Sequence[Transaction]) -> List[Transaction]:
    return sorted(transactions, key=lambda tx: tx.created_at, reverse=True)


def transaction_row(tx: Transaction) -> Dict[str, Any]:
    delta = token_delta(tx)
    return {
        "id": tx.id,
        "type": tx.type,
        "description": describe(tx),
        "tokens": fmt_tokens(delta),
        "delta": delta,
        "created_at": tx.created_at.isoformat(),
        "when": fmt_timestamp(tx.created_at),
    }


@dataclass(frozen=True)
class HistoryPage:
    rows: List[Dict[str, Any]]
    state: PageState
    window: List[Any]
    total_items: int
    per_page: int


def paginate_history(
    transactions: Sequence[Transaction],
    page_number: int,
    per_page: int,
    max_buttons: int = 5,
) -> HistoryPage:
    ordered = newest_first(transactions)
    total_pages = page_count(len(ordered), per_page)
    state = page_state(page_number, total_pages)
    rows = [transaction_row(tx) for tx in page_slice(ordered, state.page, per_page)]
    window = page_labels(compute_page_window(state.page, total_pages, max_buttons))
    return HistoryPage(
        rows=rows,
        state=state,
        window=window,
        total_items=len(ordered),
        per_page=max(1, per_page),
    )
