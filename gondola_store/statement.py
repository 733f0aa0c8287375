"""Token statement PDF rendering."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from fpdf import FPDF  # type: ignore

from .formatting import fmt_date, fmt_timestamp, fmt_tokens, parse_instant, to_latin1
from .pagination import page_count, page_slice
from .transactions import Transaction, describe, newest_first, parse_transaction, token_delta

PAGE_W = 612.0
PAGE_H = 792.0
X_LEFT = 50.0
X_RIGHT = PAGE_W - 50.0
X_WHEN = 62.0
X_DESCRIPTION = 190.0

FONT_FAMILY = "Helvetica"
FONT_SIZE_TITLE = 24
FONT_SIZE_NORMAL = 10
FONT_SIZE_SMALL = 8

COLOR_TITLE = (51, 51, 51)
COLOR_TEXT = (34, 34, 34)
COLOR_MUTED = (118, 118, 118)
COLOR_BAR = (60, 35, 110)
COLOR_BAR_TEXT = (255, 255, 255)
COLOR_CREDIT = (22, 128, 61)
COLOR_DEBIT = (185, 28, 28)

TITLE_Y = 70.0
USERNAME_Y = 100.0
GENERATED_Y = 116.0
BALANCE_Y = 132.0
BAR_Y_FIRST = 160.0
BAR_Y_CONT = 50.0
BAR_H = 22.0
ROW_H = 20.0
FOOTER_Y = PAGE_H - 30.0

ROWS_FIRST_PAGE = 28
ROWS_PER_PAGE = 33


def statement_page_count(row_count: int) -> int:
    if row_count <= ROWS_FIRST_PAGE:
        return 1
    return 1 + page_count(row_count - ROWS_FIRST_PAGE, ROWS_PER_PAGE)


class StatementRenderer:
    def __init__(self, data: Dict[str, Any], now: Optional[datetime] = None) -> None:
        self.username = str(data.get("username", "")).strip()
        self.balance = data.get("balance")
        self.generated_at = now or datetime.now(timezone.utc)
        records = data.get("transactions", []) or []
        self.transactions: List[Transaction] = newest_first(
            [parse_transaction(record) for record in records]
        )

        self.pdf = FPDF(unit="pt", format="letter")
        self.pdf.set_auto_page_break(False)

    def _draw_text(
        self,
        x: float,
        y: float,
        text: str,
        size: int,
        color: Tuple[int, int, int],
        bold: bool = False,
    ) -> None:
        self.pdf.set_text_color(*color)
        self.pdf.set_font(FONT_FAMILY, "B" if bold else "", size)
        self.pdf.text(x, y, to_latin1(text))

    def _draw_text_right(
        self,
        right: float,
        y: float,
        text: str,
        size: int,
        color: Tuple[int, int, int],
        bold: bool = False,
    ) -> None:
        self.pdf.set_font(FONT_FAMILY, "B" if bold else "", size)
        width = self.pdf.get_string_width(to_latin1(text))
        self._draw_text(right - width, y, text, size, color, bold=bold)

    def _draw_header(self) -> None:
        self._draw_text(X_LEFT, TITLE_Y, "TOKEN STATEMENT", FONT_SIZE_TITLE, COLOR_TITLE)
        if self.username:
            self._draw_text(X_LEFT, USERNAME_Y, self.username, FONT_SIZE_NORMAL, COLOR_TEXT, bold=True)
        self._draw_text(
            X_LEFT,
            GENERATED_Y,
            f"Generated {fmt_date(self.generated_at)}",
            FONT_SIZE_SMALL,
            COLOR_MUTED,
        )
        if self.balance is not None:
            self._draw_text(
                X_LEFT,
                BALANCE_Y,
                f"Balance: {self.balance} tokens",
                FONT_SIZE_NORMAL,
                COLOR_TEXT,
                bold=True,
            )

    def _draw_table_header(self, bar_y: float) -> None:
        self.pdf.set_fill_color(*COLOR_BAR)
        self.pdf.rect(X_LEFT, bar_y, X_RIGHT - X_LEFT, BAR_H, style="F")
        text_y = bar_y + 15.0
        self._draw_text(X_WHEN, text_y, "Date", FONT_SIZE_SMALL, COLOR_BAR_TEXT, bold=True)
        self._draw_text(X_DESCRIPTION, text_y, "Description", FONT_SIZE_SMALL, COLOR_BAR_TEXT, bold=True)
        self._draw_text_right(X_RIGHT - 12.0, text_y, "Tokens", FONT_SIZE_SMALL, COLOR_BAR_TEXT, bold=True)

    def _draw_rows(self, start_y: float, rows: List[Transaction]) -> None:
        y = start_y
        for tx in rows:
            delta = token_delta(tx)
            self._draw_text(X_WHEN, y, fmt_timestamp(tx.created_at), FONT_SIZE_NORMAL, COLOR_MUTED)
            self._draw_text(X_DESCRIPTION, y, describe(tx), FONT_SIZE_NORMAL, COLOR_TEXT)
            self._draw_text_right(
                X_RIGHT - 12.0,
                y,
                fmt_tokens(delta),
                FONT_SIZE_NORMAL,
                COLOR_CREDIT if delta >= 0 else COLOR_DEBIT,
                bold=True,
            )
            y += ROW_H

    def _draw_footer(self, page_number: int, total_pages: int) -> None:
        self._draw_text_right(
            X_RIGHT,
            FOOTER_Y,
            f"Page {page_number} of {total_pages}",
            FONT_SIZE_SMALL,
            COLOR_MUTED,
        )

    def render(self) -> bytes:
        total_pages = statement_page_count(len(self.transactions))

        self.pdf.add_page()
        self._draw_header()
        self._draw_table_header(BAR_Y_FIRST)
        if self.transactions:
            self._draw_rows(BAR_Y_FIRST + BAR_H + ROW_H, self.transactions[:ROWS_FIRST_PAGE])
        else:
            self._draw_text(X_WHEN, BAR_Y_FIRST + BAR_H + ROW_H, "No transactions yet.", FONT_SIZE_NORMAL, COLOR_MUTED)
        self._draw_footer(1, total_pages)

        remaining = self.transactions[ROWS_FIRST_PAGE:]
        for page_number in range(2, total_pages + 1):
            self.pdf.add_page()
            self._draw_table_header(BAR_Y_CONT)
            self._draw_rows(
                BAR_Y_CONT + BAR_H + ROW_H,
                page_slice(remaining, page_number - 1, ROWS_PER_PAGE),
            )
            self._draw_footer(page_number, total_pages)

        pdf_blob = self.pdf.output()
        if isinstance(pdf_blob, (bytes, bytearray)):
            return bytes(pdf_blob)
        if isinstance(pdf_blob, str):
            return pdf_blob.encode("latin-1")
        raise RuntimeError(f"Unexpected PDF output type: {type(pdf_blob).__name__}")


def render_statement(
    data: Dict[str, Any],
    now: Optional[Union[str, datetime]] = None,
) -> bytes:
    if now is not None:
        now = parse_instant(now)
    return StatementRenderer(data, now=now).render()
