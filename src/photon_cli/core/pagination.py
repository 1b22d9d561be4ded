"""Paginated collection walker.

List endpoints return one :class:`~photon_cli.core.models.Page` at a
time together with a ``nextPageLink``.  The helpers here follow those
links in order.

* :func:`iter_items` is lazy: each page is fetched at most once, only
  when the previous one has been consumed.
* :func:`collect_all` is all-or-nothing: a failing fetch discards every
  item gathered so far and re-raises.

Nothing is cached between walks; two walks over the same collection
issue independent fetches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TypeVar

from photon_cli.core.models import Page
from photon_cli.core.protocols import PageFetcher
from photon_cli.exceptions import PhotonCliError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def iter_pages(first_page: Page[T], fetcher: PageFetcher[T]) -> Iterator[Page[T]]:
    """Yield *first_page* and every page reachable through its links."""
    page = first_page
    yield page
    while page.next_page_link:
        link = page.next_page_link
        logger.debug("following page link %s", link)
        try:
            page = fetcher.get_page(link)
        except PhotonCliError:
            raise
        except Exception as exc:
            raise TransportError(f"Unexpected error fetching page {link}: {exc}") from exc
        yield page


def iter_items(first_page: Page[T], fetcher: PageFetcher[T]) -> Iterator[T]:
    """Yield the items of every page, preserving server order."""
    for page in iter_pages(first_page, fetcher):
        yield from page.items


def collect_all(first_page: Page[T], fetcher: PageFetcher[T]) -> list[T]:
    """Materialise the full collection starting at *first_page*.

    Raises
    ------
    TransportError
        If any continuation fetch fails; no partial list is returned.
    """
    items = list(iter_items(first_page, fetcher))
    logger.debug("collected %d item(s)", len(items))
    return items
