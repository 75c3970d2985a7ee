# azlok/pagination.py
import math
from typing import List, Sequence, TypeVar, Union

T = TypeVar("T")

ELLIPSIS = "..."


def total_pages(total_items: int, per_page: int) -> int:
    if per_page <= 0:
        raise ValueError("per_page must be > 0")
    if total_items <= 0:
        return 0
    return math.ceil(total_items / per_page)


def skip_for(page: int, size: int) -> int:
    """Offset for APIs that page with skip/limit"""
    return max(page - 1, 0) * size


class Paginator:
    """Page arithmetic for list views. Pages and item indexes are 1-based."""

    def __init__(self, total_items: int, per_page: int = 10, page: int = 1):
        self.total_items = max(total_items, 0)
        self.per_page = per_page
        self.total_pages = total_pages(self.total_items, per_page)
        self.page = min(max(page, 1), max(self.total_pages, 1))

    @property
    def skip(self) -> int:
        return skip_for(self.page, self.per_page)

    @property
    def start_index(self) -> int:
        if self.total_items == 0:
            return 0
        return self.skip + 1

    @property
    def end_index(self) -> int:
        return min(self.skip + self.per_page, self.total_items)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def slice(self, items: Sequence[T]) -> List[T]:
        return list(items[self.skip:self.skip + self.per_page])

    def window(self, max_pages: int = 5) -> List[Union[int, str]]:
        return page_window(self.page, self.total_pages, max_pages)


def page_window(current: int, total: int, max_pages: int = 5) -> List[Union[int, str]]:
    """
    Page numbers to show in a pager: first and last always, up to three
    around the current page, ELLIPSIS where pages are skipped.
    """
    if total <= max_pages:
        return list(range(1, total + 1))

    pages: List[Union[int, str]] = [1]
    start = max(2, current - 1)
    end = min(total - 1, current + 1)

    if current <= 3:
        start, end = 2, 4
    if current >= total - 2:
        start, end = total - 3, total - 1

    if start > 2:
        pages.append(ELLIPSIS)
    pages.extend(range(start, end + 1))
    if end < total - 1:
        pages.append(ELLIPSIS)
    pages.append(total)
    return pages
