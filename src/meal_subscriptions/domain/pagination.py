"""Pagination helpers for admin listings."""

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

from meal_subscriptions.domain.results import Message

T = TypeVar("T")

SHOWING = Message(
    en="Showing {start} - {end} out of {total} items",
    ar="عرض {start} - {end} من أصل {total} من العناصر",
)


@dataclass(frozen=True)
class PageRequest:
    """Requested page number and size, both starting at 1."""

    page_no: int = 1
    per_page: int = 10

    @property
    def offset(self) -> int:
        return (self.page_no - 1) * self.per_page


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of items with counters for the client."""

    items: list[T]
    total: int
    total_pages: int
    page_no: int
    showing: Message


def build_page(items: list[T], total: int, request: PageRequest) -> Page[T]:
    """Wrap a page of items with totals and the bilingual range label."""
    start = request.offset + 1 if total else 0
    end = min(request.page_no * request.per_page, total)
    return Page(
        items=items,
        total=total,
        total_pages=math.ceil(total / request.per_page),
        page_no=request.page_no,
        showing=SHOWING.format(start=start, end=end, total=total),
    )
