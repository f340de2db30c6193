"""Pagination helpers for the eBay Sell APIs (limit/offset)."""

from __future__ import annotations

from typing import Any, Callable


def page_params(page_size: int, page_number: int) -> dict[str, int]:
    """Translate a 1-based page number into limit/offset query parameters."""
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    if page_number < 1:
        raise ValueError(f"page_number must be at least 1, got {page_number}")
    return {"limit": page_size, "offset": (page_number - 1) * page_size}


def paginate(
    fetch_fn: Callable[[int, int], list[Any]],
    page_size: int,
    max_pages: int | None = None,
) -> list[Any]:
    """Collect pages until one comes back short.

    Args:
        fetch_fn: A callable taking (page_size, page_number) and returning that page.
        page_size: Items requested per page.
        max_pages: Stop after this many pages. None = no limit.

    Returns:
        All results concatenated across pages.
    """
    all_results: list[Any] = []
    page_number = 1

    while True:
        items = fetch_fn(page_size, page_number)
        all_results.extend(items)

        if len(items) < page_size:
            break
        if max_pages is not None and page_number >= max_pages:
            break
        page_number += 1

    return all_results
