"""Static CSS locator configuration for Goodreads pages.

Each scraped field is bound to one CSS selector. The table is immutable and
shared by every parse, so a change in the site's markup is a data update
(a new table, possibly loaded from JSON) rather than a code change.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cssselect import GenericTranslator, SelectorError
from pydantic import BaseModel, ConfigDict, Field, field_validator

GOODREADS_BASE_URL = "https://www.goodreads.com"
GOODREADS_LIST_PREFIX = f"{GOODREADS_BASE_URL}/list/show/"

_translator = GenericTranslator()


@dataclass(frozen=True)
class Locator:
    """A CSS selector bound to one field name.

    Attributes:
        field: Name of the field the selector locates.
        selector: CSS selector expression.
    """

    field: str
    selector: str


class LocatorTable(BaseModel):
    """Field-to-selector mapping for book and listing pages.

    Every selector is compiled when the table is built, so an invalid
    selector is reported as a ``pydantic.ValidationError`` up front instead
    of silently matching nothing at scrape time.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = Field(..., description="Book title heading")
    author: str = Field(..., description="First contributor name")
    rating: str = Field(..., description="Average rating")
    number_of_ratings: str = Field(..., description="Ratings count")
    number_of_pages: str = Field(..., description="Page count and format")
    original_publish_date: str = Field(
        ..., description="Publication info line"
    )
    number_of_reviews: str = Field(..., description="Reviews count")
    genres: str = Field(..., description="Every genre label")
    book_link: str = Field(
        ..., description="Book title anchors on a listing page"
    )

    @field_validator("*")
    @classmethod
    def _compile_selector(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("selector must not be empty")
        try:
            _translator.css_to_xpath(value)
        except SelectorError as e:
            raise ValueError(f"invalid CSS selector {value!r}: {e}") from e
        return value

    def locator(self, field: str) -> Locator:
        """Return the Locator for a field.

        Args:
            field: One of the table's field names.

        Returns:
            Locator binding ``field`` to its selector.

        Raises:
            KeyError: If the table has no such field.
        """
        if field not in type(self).model_fields:
            raise KeyError(field)
        return Locator(field=field, selector=getattr(self, field))

    @classmethod
    def from_json_file(cls, path: Path) -> LocatorTable:
        """Load a locator table from a JSON file.

        Args:
            path: Path to a JSON object with one selector per field.

        Returns:
            The validated LocatorTable.
        """
        return cls.model_validate_json(path.read_text(encoding="utf-8"))


GOODREADS_LOCATORS = LocatorTable(
    title="h1[data-testid='bookTitle']",
    author="span.ContributorLink__name[data-testid='name']",
    rating="div.RatingStatistics__rating",
    number_of_ratings="span[data-testid='ratingsCount']",
    number_of_pages="div.FeaturedDetails p[data-testid='pagesFormat']",
    original_publish_date=(
        "div.FeaturedDetails p[data-testid='publicationInfo']"
    ),
    number_of_reviews="span[data-testid='reviewsCount']",
    genres=(
        "div.BookPageMetadataSection__genres[data-testid='genresList'] "
        "span.Button__labelItem"
    ),
    book_link="a.bookTitle",
)
