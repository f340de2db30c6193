"""Tests for utils/pagination.py — limit/offset translation and page walking."""
import pytest

from ebay_listings.utils.pagination import page_params, paginate


# ── page_params ──────────────────────────────────────────────────────

def test_first_page():
    assert page_params(10, 1) == {"limit": 10, "offset": 0}


def test_later_page():
    assert page_params(25, 3) == {"limit": 25, "offset": 50}


@pytest.mark.parametrize("size,number", [(0, 1), (10, 0), (-1, 2)])
def test_invalid_page(size, number):
    with pytest.raises(ValueError):
        page_params(size, number)


# ── paginate ─────────────────────────────────────────────────────────

def _pages(*pages):
    calls = []

    def fetch(size, number):
        calls.append((size, number))
        return pages[number - 1] if number <= len(pages) else []

    return fetch, calls


def test_single_short_page():
    fetch, calls = _pages([1, 2])
    assert paginate(fetch, 5) == [1, 2]
    assert calls == [(5, 1)]


def test_multiple_pages():
    fetch, calls = _pages([1, 2], [3, 4], [5])
    assert paginate(fetch, 2) == [1, 2, 3, 4, 5]
    assert [n for _, n in calls] == [1, 2, 3]


def test_exact_multiple_fetches_empty_page():
    fetch, calls = _pages([1, 2], [3, 4])
    assert paginate(fetch, 2) == [1, 2, 3, 4]
    assert len(calls) == 3


def test_empty_results():
    fetch, _ = _pages()
    assert paginate(fetch, 10) == []


def test_max_pages():
    fetch, calls = _pages([1, 2], [3, 4], [5, 6])
    assert paginate(fetch, 2, max_pages=2) == [1, 2, 3, 4]
    assert len(calls) == 2
