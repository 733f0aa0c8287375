"""Page-number windows and page arithmetic for paged lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, TypeVar, Union

T = TypeVar("T")

ELLIPSIS_LABEL = "..."


@dataclass(frozen=True)
class PageEntry:
    kind: str
    number: Optional[int] = None

    @property
    def is_ellipsis(self) -> bool:
        return self.kind == "ellipsis"

    def label(self) -> Union[int, str]:
        if self.number is None:
            return ELLIPSIS_LABEL
        return self.number


ELLIPSIS = PageEntry("ellipsis")


def page(number: int) -> PageEntry:
    return PageEntry("page", number)


def compute_page_window(
    current_page: int,
    total_pages: int,
    max_buttons: int = 5,
) -> List[PageEntry]:
    """Return the page buttons to render for a paged list.

    Pages 1 and ``total_pages`` are always shown. Between them sits a run of
    ``max_buttons - 2`` pages centred on ``current_page``, slid inward when it
    would run off either end. A gap of one page is filled with that page; any
    wider gap collapses to a single ellipsis.
    """
    if total_pages <= 0:
        return []
    if total_pages <= max_buttons:
        return [page(number) for number in range(1, total_pages + 1)]

    current_page = clamp_page(current_page, total_pages)
    width = max(3, max_buttons) - 2
    half = width // 2

    start = max(1, current_page - half)
    end = min(total_pages, start + width - 1)
    start = max(1, end - width + 1)

    shown = sorted({1, total_pages, *range(start, end + 1)})

    entries: List[PageEntry] = []
    previous = None
    for number in shown:
        if previous is not None:
            gap = number - previous
            if gap == 2:
                entries.append(page(previous + 1))
            elif gap > 2:
                entries.append(ELLIPSIS)
        entries.append(page(number))
        previous = number
    return entries


def page_labels(entries: Sequence[PageEntry]) -> List[Union[int, str]]:
    return [entry.label() for entry in entries]


def page_count(total_items: int, per_page: int) -> int:
    if total_items <= 0:
        return 0
    per_page = max(1, per_page)
    return (total_items + per_page - 1) // per_page


def clamp_page(page_number: int, total_pages: int) -> int:
    return max(1, min(page_number, max(1, total_pages)))


def page_slice(items: Sequence[T], page_number: int, per_page: int) -> List[T]:
    per_page = max(1, per_page)
    page_number = clamp_page(page_number, page_count(len(items), per_page))
    start = (page_number - 1) * per_page
    return list(items[start : start + per_page])


@dataclass(frozen=True)
class PageState:
    page: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def previous_page(self) -> int:
        return max(self.page - 1, 1)

    @property
    def next_page(self) -> int:
        return min(self.page + 1, max(1, self.total_pages))


def page_state(page_number: int, total_pages: int) -> PageState:
    total_pages = max(0, total_pages)
    return PageState(page=clamp_page(page_number, total_pages), total_pages=total_pages)
