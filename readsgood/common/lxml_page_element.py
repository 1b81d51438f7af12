"""LxmlPageElement implementation of the PageElement protocol.

This module provides the standard implementation used by the request
manager. Every query is lenient: missing nodes, malformed markup and
unparseable selectors all degrade to "no match" instead of raising, so that
absent data can be handled as ``None`` further up.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from cssselect import SelectorError
from lxml import etree, html
from lxml.html import HtmlElement

from readsgood.common.page_element import Link

logger = logging.getLogger(__name__)

_EMPTY_DOCUMENT = b"<html><body></body></html>"


def parse_html(
    content: str | bytes, url: str = "", encoding: str = "utf-8"
) -> LxmlPageElement:
    """Parse an HTML document without ever failing.

    Empty or unparseable input produces an empty document, so that every
    subsequent selector simply matches nothing.

    Args:
        content: Raw document, either decoded text or bytes.
        url: The URL the document was retrieved from, used as the default
            base for resolving relative links.
        encoding: Encoding of ``content`` when it is bytes. Any label
            Python knows is accepted, including ones libxml2 does not,
            such as ``latin-1`` or ``utf_8``.

    Returns:
        LxmlPageElement wrapping the document root.
    """
    if isinstance(content, str):
        data = content.encode("utf-8")
        encoding = "utf-8"
    else:
        data = content

    try:
        parser = html.HTMLParser(encoding=encoding)
    except LookupError:
        data = _transcode_to_utf8(data, encoding, url)
        parser = html.HTMLParser(encoding="utf-8")

    try:
        root = html.document_fromstring(data, parser=parser)
    except (etree.ParserError, etree.XMLSyntaxError) as e:
        logger.debug(f"Treating unparseable document from {url!r} as empty: {e}")
        root = html.document_fromstring(_EMPTY_DOCUMENT)

    return LxmlPageElement(root, url)


def _transcode_to_utf8(data: bytes, encoding: str, url: str) -> bytes:
    """Re-encode bytes in an encoding libxml2 cannot name as UTF-8.

    Undecodable bytes are replaced. A label Python does not know either
    leaves the bytes as they are, to be read as UTF-8.
    """
    try:
        text = data.decode(encoding, errors="replace")
    except LookupError:
        logger.debug(
            f"Unknown encoding {encoding!r} for {url!r}, reading as UTF-8"
        )
        return data
    return text.encode("utf-8")


class LxmlPageElement:
    """A node of an lxml document, queried with CSS selectors.

    Child elements returned by queries keep the document URL, so links
    found anywhere in the tree resolve the same way.
    """

    def __init__(self, element: HtmlElement, url: str = ""):
        self._element = element
        self._url = url

    @property
    def url(self) -> str:
        """URL of the document this node belongs to."""
        return self._url

    def query_css(
        self, selector: str, description: str
    ) -> list[LxmlPageElement]:
        """Return every descendant matching ``selector``, in document order.

        An unparseable selector is logged as a warning and matches nothing.
        """
        try:
            matches = self._element.cssselect(selector)
        except SelectorError as e:
            logger.warning(
                f"Invalid CSS selector for '{description}': {e}",
                extra={"selector": selector, "request_url": self._url},
            )
            return []
        return [LxmlPageElement(match, self._url) for match in matches]

    def text_content(self) -> str:
        return str(self._element.text_content())

    def get_attribute(self, name: str) -> str | None:
        return self._element.get(name)

    def find_links(
        self,
        selector: str,
        description: str,
        base_url: str | None = None,
    ) -> list[Link]:
        """Collect the anchors matching ``selector`` that carry an href.

        Each link's selector has a 1-based positional predicate counted
        over all matches, including the skipped ones.

        Args:
            selector: CSS selector for the ``<a>`` elements.
            description: What the links are, for log messages.
            base_url: URL relative hrefs are resolved against. Defaults to
                the document URL.

        Returns:
            Links in document order, duplicates included.
        """
        base = self._url if base_url is None else base_url

        links: list[Link] = []
        for position, anchor in enumerate(
            self.query_css(selector, description), start=1
        ):
            href = anchor.get_attribute("href")
            if not href:
                logger.debug(
                    f"Skipping {description} #{position} without href",
                    extra={"selector": selector, "request_url": self._url},
                )
                continue
            links.append(
                Link(
                    url=urljoin(base, href.strip()),
                    text=anchor.text_content().strip(),
                    selector=f"({selector})[{position}]",
                )
            )
        return links
