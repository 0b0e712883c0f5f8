"""Aggregation of paged listing results.

This module provides:
- fetch_with_pages: Collects results across pages under a page ceiling
- DEFAULT_PAGE_SIZE, DEFAULT_MAX_PAGES: Default limits
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable
from typing import Any, TypeVar

from scriptsync.client.sync.types import Page, PagedResults, PartialResultsWarning

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 10

PageFetcher = Callable[[int, str | None], Page[T] | dict[str, Any]]


def fetch_with_pages(
    fetch_page: PageFetcher[T],
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
    max_results: int | None = None,
) -> PagedResults[T]:
    """Fetch pages until the listing is exhausted or a limit is reached.

    Args:
        fetch_page: Called with (page_size, page_token); the first call gets
            a None token. Returns a Page or a mapping with ``results`` and
            ``next_page_token``/``nextPageToken``.
        page_size: Items requested per page.
        max_pages: Page-count ceiling.
        max_results: Optional cap on the total number of items.

    Returns:
        PagedResults with ``partial`` set when a limit cut the listing short.
        A PartialResultsWarning is emitted in that case.
    """
    if max_pages < 1:
        raise ValueError("max_pages must be at least 1")

    results: list[T] = []
    token: str | None = None
    pages = 0

    while True:
        logger.debug("Fetching page %d (token: %s)", pages + 1, token or "initial")
        page = Page.coerce(fetch_page(page_size, token))
        results.extend(page.results)
        pages += 1
        token = page.next_page_token
        if not token or pages >= max_pages:
            break
        if max_results is not None and len(results) >= max_results:
            break

    partial = bool(token)
    if max_results is not None and len(results) > max_results:
        results = results[:max_results]
        partial = True

    if partial:
        logger.debug("Listing stopped after %d pages with more results available", pages)
        warnings.warn(
            PartialResultsWarning(
                f"Showing the first {len(results)} results; more may be available."
            ),
            stacklevel=2,
        )

    return PagedResults(results=results, partial=partial)
