"""HTTP fetching for the driver.

``AsyncRequestManager`` owns one ``httpx.AsyncClient`` and turns a URL into a
parsed document. Every transport failure leaves it as a
``TransportException`` subclass; nothing else about HTTP reaches the driver.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from readsgood.common.exceptions import (
    HTMLResponseAssumptionException,
    RequestFailedException,
    RequestTimeoutException,
)
from readsgood.common.lxml_page_element import LxmlPageElement, parse_html

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; readsgood/0.1; +https://www.goodreads.com)"
    ),
    "Accept": "text/html,application/xhtml+xml",
}


class AsyncRequestManager:
    """Fetches and parses HTML documents over a shared httpx.AsyncClient.

    ``fetch`` may be awaited from many tasks at once; each call owns its
    response and document exclusively.

    Example::

        async with AsyncRequestManager(timeout=30.0) as manager:
            page = await manager.fetch("https://www.goodreads.com/book/show/1")
    """

    def __init__(
        self,
        timeout: float | None = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create the shared client.

        Args:
            timeout: Per-request timeout in seconds, or None for no limit.
            headers: Headers sent with every request. Defaults to
                DEFAULT_HEADERS.
            transport: Optional httpx transport, e.g. httpx.MockTransport.
        """
        self.timeout = timeout

        client_kwargs: dict[str, Any] = {
            "timeout": timeout,
            "headers": headers if headers is not None else DEFAULT_HEADERS,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> AsyncRequestManager:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def fetch(self, url: str) -> LxmlPageElement:
        """Fetch a URL and parse the body as HTML.

        Client errors (4xx) are not raised: their body is parsed like any
        other page, which leaves every field absent.

        Args:
            url: Absolute URL to fetch.

        Returns:
            The parsed document. Never fails on malformed markup.

        Raises:
            HTMLResponseAssumptionException: If the server returns a 5xx code.
            RequestTimeoutException: If the request times out.
            RequestFailedException: If the connection fails.
        """
        logger.debug(f"GET {url}")
        try:
            http_response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise RequestTimeoutException(
                url=url, timeout_seconds=self.timeout
            ) from e
        except httpx.TransportError as e:
            raise RequestFailedException(url=url, reason=str(e) or repr(e)) from e

        if http_response.status_code >= 500:
            raise HTMLResponseAssumptionException(
                status_code=http_response.status_code,
                expected_codes=[200],
                url=url,
            )

        if http_response.status_code >= 400:
            logger.warning(
                f"HTTP {http_response.status_code} from {url}; "
                "parsing body anyway"
            )

        return parse_html(
            http_response.content,
            url=url,
            encoding=http_response.encoding or "utf-8",
        )
