"""Tests for the paginated collection walker."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from photon_cli.core.models import Page
from photon_cli.core.pagination import collect_all, iter_items, iter_pages
from photon_cli.exceptions import TransportError

from factories import make_page


class LinkedPages:
    """Serves pages by link and counts fetches (the first page counts too)."""

    def __init__(self, first: Page[Any], by_link: dict[str, Page[Any]]) -> None:
        self._first = first
        self._by_link = by_link
        self.fetched: list[str] = []

    def first_page(self) -> Page[Any]:
        self.fetched.append("<first>")
        return self._first

    def get_page(self, link: str) -> Page[Any]:
        self.fetched.append(link)
        return self._by_link[link]


def _three_pages() -> LinkedPages:
    return LinkedPages(
        make_page("a", "b", next_link="L2"),
        {"L2": make_page("c", next_link="L3"), "L3": make_page()},
    )


# ---------------------------------------------------------------------------
# Ordering and fetch counts
# ---------------------------------------------------------------------------

class TestCollectAll:
    def test_follows_links_in_order(self) -> None:
        pages = _three_pages()
        assert collect_all(pages.first_page(), pages) == ["a", "b", "c"]
        assert pages.fetched == ["<first>", "L2", "L3"]

    def test_single_page(self) -> None:
        fetcher = MagicMock()
        assert collect_all(make_page("x"), fetcher) == ["x"]
        fetcher.get_page.assert_not_called()

    def test_walks_are_independent_and_repeatable(self) -> None:
        pages = _three_pages()
        first = collect_all(pages.first_page(), pages)
        second = collect_all(pages.first_page(), pages)
        assert first == second == ["a", "b", "c"]
        assert len(pages.fetched) == 6

    def test_failure_discards_partial_results(self) -> None:
        fetcher = MagicMock()
        fetcher.get_page.side_effect = [make_page("c", next_link="L3"), TransportError("503")]
        result: list[str] | None = None
        with pytest.raises(TransportError):
            result = collect_all(make_page("a", "b", next_link="L2"), fetcher)
        assert result is None

    def test_raw_exceptions_are_wrapped(self) -> None:
        fetcher = MagicMock()
        fetcher.get_page.side_effect = KeyError("items")
        with pytest.raises(TransportError, match="L2"):
            collect_all(make_page("a", next_link="L2"), fetcher)


class TestLaziness:
    def test_pages_fetched_on_demand(self) -> None:
        pages = _three_pages()
        items = iter_items(pages.first_page(), pages)
        assert next(items) == "a"
        assert next(items) == "b"
        assert pages.fetched == ["<first>"]
        assert next(items) == "c"
        assert pages.fetched == ["<first>", "L2"]

    def test_iter_pages_yields_every_page(self) -> None:
        pages = _three_pages()
        assert len(list(iter_pages(pages.first_page(), pages))) == 3
