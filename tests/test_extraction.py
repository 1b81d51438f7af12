"""Tests for field extraction and post-processing."""

import pytest

from readsgood.common.extraction import (
    count,
    extract,
    extract_all,
    first_token,
    publication_date,
)
from readsgood.common.locators import GOODREADS_LOCATORS, Locator
from readsgood.common.lxml_page_element import parse_html


@pytest.fixture
def genres_page():
    return parse_html(
        """
        <div class="genres">
          <span class="label">Fantasy</span>
          <span class="label">Classics</span>
          <span class="label">...more</span>
          <span class="label">…more</span>
          <span class="label">Fiction</span>
        </div>
        """
    )


class TestExtract:
    """extract shall return the first match's text, or None."""

    def test_no_match_returns_none(self, book_page):
        assert extract(book_page, Locator("missing", "div.nothing-here")) is None

    def test_empty_document_returns_none_for_every_locator(self):
        page = parse_html(b"")

        for field in type(GOODREADS_LOCATORS).model_fields:
            assert extract(page, GOODREADS_LOCATORS.locator(field)) is None

    def test_first_match_wins(self, book_page):
        author = extract(book_page, GOODREADS_LOCATORS.locator("author"))

        assert author == "Franz Kafka"

    def test_text_is_concatenated(self):
        page = parse_html("<h1>The <i>Hobbit</i>, or There and Back</h1>")

        assert extract(page, Locator("title", "h1")) == (
            "The Hobbit, or There and Back"
        )


class TestExtractAll:
    """extract_all shall return every match minus the sentinel placeholder."""

    def test_sentinels_are_removed(self, genres_page):
        genres = extract_all(genres_page, Locator("genres", "span.label"))

        assert genres == ["Fantasy", "Classics", "Fiction"]

    def test_without_sentinel_result_is_unchanged(self):
        page = parse_html(
            '<span class="label">Horror</span><span class="label">Gothic</span>'
        )

        assert extract_all(page, Locator("genres", "span.label")) == [
            "Horror",
            "Gothic",
        ]

    def test_no_matches_is_empty_list(self, genres_page):
        assert extract_all(genres_page, Locator("genres", "li")) == []


class TestFirstToken:
    """Page count post-processing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("312 pages", "312"),
            ("1 page", "1"),
            ("26 pages, Board Book", "26"),
            ("640", "640"),
            ("", None),
            ("   ", None),
            (None, None),
        ],
    )
    def test_first_token(self, raw, expected):
        assert first_token(raw) == expected


class TestPublicationDate:
    """Publication date post-processing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("First published March 1, 2001", "March 1, 2001"),
            ("Published 2020", "2020"),
            ("  First published   July 1, 1954  ", "July 1, 1954"),
            ("Published January 5, 2010 by Penguin", "January 5, 2010 by Penguin"),
            ("Expected publication 2030", None),
            ("First published", None),
            (None, None),
        ],
    )
    def test_publication_date(self, raw, expected):
        assert publication_date(raw) == expected


class TestCount:
    """Ratings and reviews count post-processing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1,234\u00a0ratings", "1234"),
            ("1,072,519\u00a0ratings", "1072519"),
            ("42\u00a0reviews", "42"),
            ("1\u202f234\u00a0ratings", "1234"),
            ("1\u00a0234\u00a0ratings", "1"),
            ("7", "7"),
            ("", None),
            (None, None),
        ],
    )
    def test_count(self, raw, expected):
        assert count(raw) == expected
