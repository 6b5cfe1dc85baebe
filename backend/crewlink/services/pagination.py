"""
Page arithmetic and slicing shared by every paged view.

Pages are 1-based. Callers clamp `page >= 1` before calling; nothing here
clamps or raises for out-of-range pages.
"""
import math
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool


@dataclass(frozen=True)
class Page(Generic[T]):
    data: list[T]
    pagination: Pagination


def calculate_pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def apply_pagination(data: Sequence[T], page: int, limit: int) -> Page[T]:
    """Slice one page out of `data`; an out-of-range page is empty."""
    start = (page - 1) * limit
    return Page(
        data=list(data[start:start + limit]),
        pagination=calculate_pagination(page, limit, len(data)),
    )


def cursor_paginate(
    data: Sequence[T],
    cursor: Optional[str],
    limit: int,
    get_cursor: Callable[[T], str],
) -> tuple[list[T], Optional[str]]:
    """
    Keyset-style paging for infinite scroll.
    
    Returns the items after `cursor` and the cursor of the last returned item
    when more items follow. An unknown cursor yields an empty page.
    """
    if not cursor:
        start = 0
    else:
        keys = [get_cursor(item) for item in data]
        if cursor not in keys:
            return [], None
        start = keys.index(cursor) + 1
    
    end = start + limit
    items = list(data[start:end])
    next_cursor = get_cursor(items[-1]) if items and end < len(data) else None
    return items, next_cursor
