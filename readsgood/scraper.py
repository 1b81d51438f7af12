"""Goodreads Listopia scraper.

The scraper only parses; it never performs I/O. The driver fetches the
listing and book pages and hands the parsed documents to:

- ``extract_links`` for each listing page, to discover book pages
- ``parse_book`` for each book page, to assemble a ``Book``
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from readsgood.common.extraction import (
    count,
    extract,
    extract_all,
    first_token,
    publication_date,
)
from readsgood.common.locators import (
    GOODREADS_BASE_URL,
    GOODREADS_LOCATORS,
    LocatorTable,
)
from readsgood.common.page_element import Link, PageElement
from readsgood.data_types import (
    Book,
    BookParseResult,
    IncompleteBook,
    ParsedBook,
)

logger = logging.getLogger(__name__)


def _keep(text: str | None) -> str | None:
    return text


# Post-processing applied to each required field, in Book field order
_REQUIRED_FIELDS: dict[str, Callable[[str | None], str | None]] = {
    "title": _keep,
    "author": _keep,
    "rating": _keep,
    "number_of_pages": first_token,
    "original_publish_date": publication_date,
    "number_of_ratings": count,
    "number_of_reviews": count,
}


class GoodreadsScraper:
    """Parser for Goodreads listing and book pages.

    Attributes:
        locators: CSS selectors for every field.
        base_url: Site origin that relative book links are resolved against.
    """

    def __init__(
        self,
        locators: LocatorTable = GOODREADS_LOCATORS,
        base_url: str = GOODREADS_BASE_URL,
    ) -> None:
        self.locators = locators
        self.base_url = base_url

    def extract_links(self, page: PageElement) -> list[Link]:
        """Find every book page linked from a listing page.

        Anchors without an href are skipped. Order is preserved and
        duplicates are kept.

        Args:
            page: Parsed listing page.

        Returns:
            Links to book pages with absolute URLs.
        """
        return page.find_links(
            self.locators.book_link, "book title links", base_url=self.base_url
        )

    def parse_book(self, page: PageElement, url: str = "") -> BookParseResult:
        """Assemble a Book from a book page.

        If any required field is absent the whole page is rejected: a
        partial row is never produced. Genres never cause a rejection.

        Args:
            page: Parsed book page.
            url: The page's URL, for logging and the result.

        Returns:
            ParsedBook when every required field was found, otherwise
            IncompleteBook naming the missing fields.
        """
        values: dict[str, str | None] = {
            field: normalize(extract(page, self.locators.locator(field)))
            for field, normalize in _REQUIRED_FIELDS.items()
        }
        genres = extract_all(page, self.locators.locator("genres"))

        missing = tuple(field for field, value in values.items() if value is None)
        if missing:
            return IncompleteBook(url=url, missing=missing)

        book = Book(genres=tuple(genres), **values)
        logger.info(
            f"Parsed book: '{book.title}' by '{book.author}'",
            extra={"request_url": url},
        )
        return ParsedBook(book=book, url=url)
