"""Public package API for the Gondola store helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Union

from .pagination import PageEntry, compute_page_window
from .proration import compute_unused_entitlement, quote_plan_change


def render_statement(
    data: Dict[str, Any],
    now: Optional[Union[str, datetime]] = None,
) -> bytes:
    from .statement import render_statement as _render_statement

    return _render_statement(data, now=now)


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    from .server import run as _run

    _run(host, port)


__all__ = [
    "PageEntry",
    "compute_page_window",
    "compute_unused_entitlement",
    "quote_plan_change",
    "render_statement",
    "run",
]
