# tests/test_pagination.py
import pytest

from azlok.pagination import ELLIPSIS, Paginator, page_window, skip_for, total_pages


def test_total_pages():
    assert total_pages(95, 10) == 10
    assert total_pages(100, 10) == 10
    assert total_pages(0, 10) == 0
    with pytest.raises(ValueError):
        total_pages(5, 0)


def test_last_page_indexes():
    p = Paginator(95, per_page=10, page=10)
    assert (p.start_index, p.end_index) == (91, 95)
    assert p.has_previous and not p.has_next
    assert p.slice(list(range(1, 96))) == [91, 92, 93, 94, 95]


def test_page_is_clamped():
    assert Paginator(95, per_page=10, page=99).page == 10
    assert Paginator(95, per_page=10, page=0).page == 1
    empty = Paginator(0)
    assert (empty.page, empty.total_pages, empty.start_index, empty.end_index) == (1, 0, 0, 0)


def test_skip_for():
    assert skip_for(1, 20) == 0
    assert skip_for(3, 20) == 40
    assert skip_for(0, 20) == 0


def test_page_window():
    assert page_window(2, 4) == [1, 2, 3, 4]
    assert page_window(1, 10) == [1, 2, 3, 4, ELLIPSIS, 10]
    assert page_window(5, 10) == [1, ELLIPSIS, 4, 5, 6, ELLIPSIS, 10]
    assert page_window(10, 10) == [1, ELLIPSIS, 7, 8, 9, 10]
    assert Paginator(95, 10, 5).window() == page_window(5, 10)
