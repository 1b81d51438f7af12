"""Core data types for the Listopia scraper.

This module contains the types that flow between the scraper, the driver
and the CSV sink:

- ``Book``: a fully-populated, validated book record
- ``ParsedBook`` / ``IncompleteBook``: the tagged outcome of parsing one
  book page, so that the completeness contract is explicit
- ``PageTarget``: one page of a paginated listing
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

CSV_HEADER: tuple[str, ...] = (
    "title",
    "author",
    "original_publish_date",
    "rating",
    "number_of_ratings",
    "number_of_pages",
    "number_of_reviews",
    "genres",
)


class Book(BaseModel):
    """A book scraped from its Goodreads detail page.

    Every scalar field is required: a page missing any of them never
    becomes a Book (see ``IncompleteBook``). Genres may be empty.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Book title")
    author: str = Field(..., description="First listed author")
    rating: str = Field(..., description="Average rating, e.g. 4.27")
    original_publish_date: str = Field(
        ..., description="Original publication date, e.g. March 1, 2001"
    )
    number_of_pages: str = Field(..., description="Page count, e.g. 312")
    number_of_ratings: str = Field(
        ..., description="Ratings count without separators"
    )
    number_of_reviews: str = Field(
        ..., description="Reviews count without separators"
    )
    genres: tuple[str, ...] = Field(
        default=(), description="Genre labels in page order"
    )

    def to_row(self) -> list[str]:
        """Render the book as CSV cells in ``CSV_HEADER`` order.

        Returns:
            One string per column; genres are joined with ", ".
        """
        return [
            self.title,
            self.author,
            self.original_publish_date,
            self.rating,
            self.number_of_ratings,
            self.number_of_pages,
            self.number_of_reviews,
            ", ".join(self.genres),
        ]


@dataclass(frozen=True)
class ParsedBook:
    """A book page that yielded every required field.

    Attributes:
        book: The assembled record.
        url: The book page it was parsed from.
    """

    book: Book
    url: str = ""
    __match_args__ = ("book",)


@dataclass(frozen=True)
class IncompleteBook:
    """A book page missing one or more required fields.

    This usually means a layout mismatch or a page that is not a book at
    all. It is dropped, never written.

    Attributes:
        url: The book page that was parsed.
        missing: Names of the absent required fields.
    """

    url: str
    missing: tuple[str, ...]
    __match_args__ = ("missing",)


BookParseResult = ParsedBook | IncompleteBook


@dataclass(frozen=True)
class PageTarget:
    """One page of a paginated listing.

    Attributes:
        base_url: The listing URL without a page parameter.
        page: 1-based page index.
    """

    base_url: str
    page: int

    @property
    def url(self) -> str:
        """The listing URL with ``page={page}`` appended to its query."""
        separator = "&" if urlsplit(self.base_url).query else "?"
        return f"{self.base_url}{separator}page={self.page}"
