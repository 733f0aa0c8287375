"""Parsing and display helpers for instants, token amounts and prices."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Union

from dateutil import parser as dateutil_parser


def parse_instant(raw: Union[str, datetime]) -> datetime:
    """Parse an ISO-ish timestamp into an aware datetime; naive values are UTC."""
    if isinstance(raw, datetime):
        value = raw
    else:
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError(f"Not a timestamp: {raw!r}")
        try:
            value = dateutil_parser.isoparse(raw.strip())
        except (ValueError, OverflowError):
            try:
                value = dateutil_parser.parse(raw.strip())
            except (ValueError, OverflowError) as exc:
                raise ValueError(f"Not a timestamp: {raw!r}") from exc
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def fmt_date(raw: Union[str, datetime]) -> str:
    """Return the instant formatted as 'Mar 14, 2025', or the input if unparseable."""
    try:
        value = parse_instant(raw)
    except ValueError:
        return str(raw).strip()
    return value.strftime("%b %d, %Y")


def fmt_timestamp(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{value.strftime('%b')} {value.day}, {hour}:{value.minute:02d} {suffix}"


def fmt_tokens(delta: int) -> str:
    return f"+{delta}" if delta >= 0 else str(delta)


def fmt_usd(amount: Any) -> str:
    try:
        return f"${float(amount):,.2f}"
    except (TypeError, ValueError):
        return str(amount)


def to_latin1(text: str) -> str:
    # Core PDF fonts only cover Latin-1.
    return text.encode("latin-1", "replace").decode("latin-1")
