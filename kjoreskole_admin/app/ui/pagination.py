from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Sequence, TypeVar

from kjoreskole_admin.app.config import DEFAULT_PAGE_SIZE, ELLIPSIS, PAGE_SIZE_OPTIONS, PAGE_WINDOW_DELTA

T = TypeVar("T")


@dataclass(frozen=True)
class PaginationState:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total: int = 0

    @property
    def total_pages(self) -> int:
        return count_pages(self.total, self.page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class PageSlice:
    page_items: list
    start_index: int
    end_index: int
    total_pages: int


def count_pages(total: int, page_size: int) -> int:
    return max(1, math.ceil(max(0, total) / max(1, page_size)))


def paginate(items: Sequence[T], page: int, limit: int) -> PageSlice:
    """Slice one page out of ``items``.

    ``start_index``/``end_index`` are 1-based and inclusive, ready for a
    "Viser X–Y av Z" line; both are 0 for an empty collection.
    """
    limit = max(1, limit)
    total = len(items)
    total_pages = count_pages(total, limit)
    page = min(max(1, page), total_pages)
    offset = (page - 1) * limit
    page_items = list(items[offset : offset + limit])
    if not page_items:
        return PageSlice(page_items=[], start_index=0, end_index=0, total_pages=total_pages)
    return PageSlice(
        page_items=page_items,
        start_index=offset + 1,
        end_index=offset + len(page_items),
        total_pages=total_pages,
    )


def set_page(state: PaginationState, page: int) -> PaginationState:
    if page < 1 or page > state.total_pages or page == state.page:
        return state
    return replace(state, page=page)


def set_page_size(state: PaginationState, page_size: int) -> PaginationState:
    if page_size not in PAGE_SIZE_OPTIONS or page_size == state.page_size:
        return state
    return replace(state, page_size=page_size, page=1)


def set_total(state: PaginationState, total: int) -> PaginationState:
    total = max(0, total)
    page = min(state.page, count_pages(total, state.page_size))
    return replace(state, total=total, page=page)


def next_page(state: PaginationState) -> PaginationState:
    return set_page(state, state.page + 1)


def prev_page(state: PaginationState) -> PaginationState:
    return set_page(state, state.page - 1)


def reset_page(state: PaginationState) -> PaginationState:
    return state if state.page == 1 else replace(state, page=1)


def page_window(current: int, total_pages: int, delta: int = PAGE_WINDOW_DELTA) -> list[int]:
    if total_pages <= 1:
        return [1]
    current = min(max(1, current), total_pages)
    low = max(2, current - delta)
    high = min(total_pages - 1, current + delta)

    window = [1]
    if low == 3:
        window.append(2)
    elif low > 3:
        window.append(ELLIPSIS)
    window.extend(range(low, high + 1))
    if high == total_pages - 2:
        window.append(total_pages - 1)
    elif high < total_pages - 2:
        window.append(ELLIPSIS)
    window.append(total_pages)
    return window
