"""Shared fixtures for the readsgood test suite."""

import asyncio
import threading
from collections.abc import Iterator

import pytest
from aiohttp import web

from readsgood.common.lxml_page_element import LxmlPageElement, parse_html
from readsgood.scraper import GoodreadsScraper
from tests.mock_server import (
    BOOKS,
    create_app,
    generate_book_html,
    generate_listing_html,
)
from tests.utils import find_free_port


@pytest.fixture
def book_page() -> LxmlPageElement:
    """A complete book page (The Metamorphosis)."""
    url = "https://www.goodreads.com/book/show/2.The_Metamorphosis"
    return parse_html(generate_book_html(BOOKS["2.The_Metamorphosis"]), url)


@pytest.fixture
def listing_page() -> LxmlPageElement:
    """A listing page with a title anchor missing its href, then 3 books."""
    html = generate_listing_html(
        [
            "1.The_Very_Hungry_Caterpillar",
            "2.The_Metamorphosis",
            "1.The_Very_Hungry_Caterpillar",
        ],
        include_broken_anchor=True,
    )
    return parse_html(
        html, "https://www.goodreads.com/list/show/1.Bug_Classics?page=1"
    )


class MockSiteServer(threading.Thread):
    """Serves the mock Goodreads app from its own event loop and thread.

    ``url`` is the site origin, e.g. ``http://127.0.0.1:8080``.
    """

    def __init__(self, app: web.Application, port: int) -> None:
        super().__init__(daemon=True)
        self.app = app
        self.url = f"http://127.0.0.1:{port}"
        self._port = port
        self._loop = asyncio.new_event_loop()
        self._runner: web.AppRunner | None = None
        self._ready = threading.Event()

    def run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_until_complete(self._serve())
        self._ready.set()
        self._loop.run_forever()

    async def _serve(self) -> None:
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        await web.TCPSite(self._runner, "127.0.0.1", self._port).start()

    def __enter__(self) -> "MockSiteServer":
        self.start()
        if not self._ready.wait(timeout=5.0):
            raise RuntimeError(f"mock site did not start on {self.url}")
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._runner is not None:
            asyncio.run_coroutine_threadsafe(
                self._runner.cleanup(), self._loop
            ).result(timeout=2.0)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self.join(timeout=2.0)


@pytest.fixture
def goodreads_server() -> Iterator[MockSiteServer]:
    """The mock Goodreads site, running for the duration of one test."""
    with MockSiteServer(create_app(), find_free_port()) as server:
        yield server


@pytest.fixture
def server_url(goodreads_server: MockSiteServer) -> str:
    """Origin of the mock site."""
    return goodreads_server.url


@pytest.fixture
def server_scraper(server_url: str) -> GoodreadsScraper:
    """A scraper that resolves book links against the mock site."""
    return GoodreadsScraper(base_url=server_url)
