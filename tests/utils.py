"""Test utilities for driver and pipeline tests."""

import asyncio
import socket
from collections.abc import Awaitable, Callable
from contextlib import closing
from typing import Any

from readsgood.common.exceptions import TransportException
from readsgood.common.lxml_page_element import LxmlPageElement, parse_html


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class FakeRequestManager:
    """In-memory fetch capability.

    Serves HTML from a dict keyed by URL. A value that is an exception is
    raised instead. Records the order of requests and the highest number of
    requests in flight at once. ``events`` interleaves
    ("start", url) and ("end", url) entries in the order they happened.

    Example:
        manager = FakeRequestManager({"https://x/": "<html></html>"})
        driver = AsyncDriver(request_manager=manager)
    """

    def __init__(
        self,
        pages: dict[str, str | TransportException],
        delay: float = 0.01,
    ) -> None:
        self.pages = pages
        self.delay = delay
        self.requested: list[str] = []
        self.events: list[tuple[str, str]] = []
        self.completed: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def fetch(self, url: str) -> LxmlPageElement:
        self.requested.append(url)
        self.events.append(("start", url))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            page = self.pages.get(url, "")
            if isinstance(page, TransportException):
                raise page
            return parse_html(page, url)
        finally:
            self.in_flight -= 1
            self.completed.append(url)
            self.events.append(("end", url))

    async def close(self) -> None:
        self.closed = True


def collect_results_async() -> tuple[
    Callable[[Any], Awaitable[None]], list[Any]
]:
    """Create an async callback that collects results in a list.

    Returns:
        A tuple of (async_callback_function, results_list).

    Example:
        callback, results = collect_results_async()
        driver = AsyncDriver(on_incomplete=callback)
        await driver.run(url, 1)
        assert len(results) > 0
    """
    results: list[Any] = []

    async def callback(data: Any) -> None:
        results.append(data)

    return callback, results


def answer_async(
    value: bool,
) -> tuple[Callable[[TransportException], Awaitable[bool]], list[Any]]:
    """Create an on_book_fetch_error callback that always returns ``value``.

    Returns:
        A tuple of (async_callback_function, received_exceptions).
    """
    received: list[Any] = []

    async def callback(exception: TransportException) -> bool:
        received.append(exception)
        return value

    return callback, received
