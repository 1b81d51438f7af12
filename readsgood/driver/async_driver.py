"""Asynchronous pagination driver.

This module contains the driver that walks a paginated listing and scrapes
every book it links to.

Pages are processed strictly in order. Within one page, every book page is
fetched concurrently and the driver waits for the whole batch to settle
before parsing, so that at most one page's worth of requests is ever in
flight.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from typing_extensions import assert_never

from readsgood.common.exceptions import TransportException
from readsgood.common.page_element import Link, PageElement
from readsgood.common.request_manager import AsyncRequestManager
from readsgood.data_types import (
    Book,
    IncompleteBook,
    PageTarget,
    ParsedBook,
)
from readsgood.scraper import GoodreadsScraper

logger = logging.getLogger(__name__)


class RequestManager(Protocol):
    """The fetch capability the driver depends on."""

    async def fetch(self, url: str) -> PageElement: ...

    async def close(self) -> None: ...


async def log_incomplete_book(result: IncompleteBook) -> None:
    """Default callback for book pages missing required fields.

    Args:
        result: The rejected page.
    """
    logger.debug(
        f"Dropping incomplete book page {result.url}: "
        f"missing {', '.join(result.missing)}",
        extra={"request_url": result.url, "missing": result.missing},
    )


class AsyncDriver:
    """Asynchronous driver for scraping a paginated Listopia list.

    Example usage::

        driver = AsyncDriver(GoodreadsScraper())
        books = await driver.run(
            "https://www.goodreads.com/list/show/1.Best_Books_Ever", 3
        )
    """

    def __init__(
        self,
        scraper: GoodreadsScraper | None = None,
        request_manager: RequestManager | None = None,
        on_book_fetch_error: Callable[[TransportException], Awaitable[bool]]
        | None = None,
        on_incomplete: Callable[[IncompleteBook], Awaitable[None]]
        | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            scraper: Parser for listing and book pages. Defaults to a
                GoodreadsScraper with the standard locators.
            request_manager: Fetch capability. If None, each call to ``run``
                creates its own AsyncRequestManager and closes it on return,
                so the driver can be run more than once.
            on_book_fetch_error: Optional async callback invoked when a book
                page cannot be fetched. It should return True to skip that
                book and continue or False to stop. If not provided, the
                exception propagates and stops the run. Listing page
                failures always stop the run.
            on_incomplete: Optional async callback invoked for each book page
                missing required fields. Defaults to log_incomplete_book.
        """
        self.scraper = scraper or GoodreadsScraper()

        self.request_manager = request_manager
        self._owns_request_manager = request_manager is None

        self.on_book_fetch_error = on_book_fetch_error
        self.on_incomplete = on_incomplete or log_incomplete_book

    async def run(self, base_url: str, page_count: int) -> list[Book]:
        """Scrape pages 1 to ``page_count`` of a listing.

        Args:
            base_url: Listing URL without a page parameter.
            page_count: Number of pages to scrape. Values below 1 scrape
                nothing.

        Returns:
            Every complete book, in page order and then listing order.

        Raises:
            TransportException: If a listing page, or a book page without a
                skipping on_book_fetch_error, could not be fetched. Nothing
                scraped so far is returned.
        """
        manager = self.request_manager
        if manager is None or self._owns_request_manager:
            manager = self.request_manager = AsyncRequestManager()

        books: list[Book] = []
        try:
            for page in range(1, page_count + 1):
                target = PageTarget(base_url=base_url, page=page)
                logger.info(
                    f"Scraping page {page} of {page_count}, url: {target.url}"
                )
                books.extend(await self._scrape_page(target, manager))
        finally:
            if self._owns_request_manager:
                await manager.close()

        logger.info(f"Scraped {len(books)} books from {base_url}")
        return books

    async def _scrape_page(
        self, target: PageTarget, manager: RequestManager
    ) -> list[Book]:
        """Scrape one listing page and every book it links to.

        Args:
            target: The listing page to scrape.
            manager: Fetch capability for this run.

        Returns:
            Complete books from this page in listing order.
        """
        try:
            listing = await manager.fetch(target.url)
        except TransportException as e:
            logger.error(
                f"Failed to retrieve listing page {target.page}: {e.message}",
                extra={"request_url": target.url, "page": target.page},
            )
            raise

        links = self.scraper.extract_links(listing)
        logger.debug(f"Found {len(links)} books on page {target.page}")

        pages = await self._fetch_books(links, manager)

        books: list[Book] = []
        for link, book_page in zip(links, pages):
            if book_page is None:
                continue
            result = self.scraper.parse_book(book_page, link.url)
            match result:
                case ParsedBook(book):
                    books.append(book)
                case IncompleteBook():
                    await self.on_incomplete(result)
                case _:
                    assert_never(result)
        return books

    async def _fetch_books(
        self, links: Sequence[Link], manager: RequestManager
    ) -> list[PageElement | None]:
        """Fetch every book page concurrently and wait for all of them.

        Args:
            links: Book links in listing order.
            manager: Fetch capability for this run.

        Returns:
            One entry per link, in the same order. None marks a book whose
            failure was skipped by on_book_fetch_error.

        Raises:
            TransportException: The first failure in listing order that was
                not skipped, once every request has settled.
        """
        results = await asyncio.gather(
            *(manager.fetch(link.url) for link in links),
            return_exceptions=True,
        )

        pages: list[PageElement | None] = []
        for link, result in zip(links, results):
            if isinstance(result, TransportException):
                logger.error(
                    f"Failed to retrieve book page: {result.message}",
                    extra={"request_url": link.url},
                )
                if self.on_book_fetch_error is not None and (
                    await self.on_book_fetch_error(result)
                ):
                    pages.append(None)
                    continue
                raise result
            if isinstance(result, BaseException):
                raise result
            pages.append(result)
        return pages
