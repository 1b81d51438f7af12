"""Read-only view of a parsed HTML document.

The scraper only ever talks to a ``PageElement``. None of its operations
raise on missing or malformed markup: a selector that matches nothing gives
an empty list, and an anchor without an ``href`` is not a link.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Link:
    """An anchor found on a page, with its href made absolute.

    Attributes:
        url: Absolute URL the anchor points to.
        text: Trimmed anchor text.
        selector: Selector that picks out this anchor among the matches,
            e.g. ``(a.bookTitle)[3]``.
    """

    url: str
    text: str
    selector: str


class PageElement(Protocol):
    """A node of a parsed document, or the document itself."""

    def query_css(self, selector: str, description: str) -> list[PageElement]:
        """Return every descendant matching ``selector``, in document order.

        ``description`` names what is being looked for and only appears in
        log messages. An unparseable selector matches nothing.
        """
        ...

    def text_content(self) -> str:
        """Return the concatenated text of this node and its descendants."""
        ...

    def get_attribute(self, name: str) -> str | None: ...

    def find_links(
        self,
        selector: str,
        description: str,
        base_url: str | None = None,
    ) -> list[Link]:
        """Collect the anchors matching ``selector`` that carry an href.

        Args:
            selector: CSS selector for the ``<a>`` elements.
            description: What the links are, for log messages.
            base_url: URL relative hrefs are resolved against. Defaults to
                the URL of the document.

        Returns:
            Links in document order, duplicates included.
        """
        ...
