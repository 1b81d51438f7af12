"""readsgood CLI: export a Goodreads Listopia list to CSV.

Usage:
    readsgood export                          # Prompt for url, file and pages
    readsgood export --url URL --output books.csv --pages 3
    readsgood export ... --skip-failed-books  # Skip book pages that fail to load
    readsgood locators                        # Show the CSS locator table
    readsgood locators --locators my.json     # Validate a locator override
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import click
from pydantic import ValidationError

from readsgood.common.exceptions import TransportException
from readsgood.common.locators import (
    GOODREADS_LIST_PREFIX,
    GOODREADS_LOCATORS,
    LocatorTable,
)
from readsgood.common.request_manager import (
    DEFAULT_TIMEOUT,
    AsyncRequestManager,
)
from readsgood.data_types import Book
from readsgood.driver.async_driver import AsyncDriver
from readsgood.pipeline import export_books
from readsgood.scraper import GoodreadsScraper

logger = logging.getLogger(__name__)

MAX_PAGES = 10


def validate_listing_url(
    ctx: click.Context, param: click.Parameter, value: str
) -> str:
    """Check that a URL points at a Listopia list without a page parameter.

    Raises:
        click.BadParameter: If the URL is empty, not a Listopia list, or
            already carries a page query parameter.
    """
    value = value.strip()
    if not value:
        raise click.BadParameter("Must provide a Goodreads Listopia url")
    if not value.startswith(GOODREADS_LIST_PREFIX):
        raise click.BadParameter(
            "Ensure the Goodreads Listopia url is valid, e.g. "
            f"{GOODREADS_LIST_PREFIX}1.Best_Books_Ever"
        )
    query = parse_qs(urlsplit(value).query, keep_blank_values=True)
    if "page" in query:
        raise click.BadParameter(
            "Remove the page query parameter; use --pages instead"
        )
    return value


def validate_filename(
    ctx: click.Context, param: click.Parameter, value: Path
) -> Path:
    """Check that the output file is a CSV file.

    Raises:
        click.BadParameter: If the name does not end in ``.csv``.
    """
    if not value.name.endswith(".csv"):
        raise click.BadParameter(
            "File names must end in `.csv`. e.g. `books.csv`"
        )
    return value


def load_locators(path: Path | None) -> LocatorTable:
    """Load a locator override, or return the default table.

    Raises:
        click.BadParameter: If the file is not a valid locator table.
    """
    if path is None:
        return GOODREADS_LOCATORS
    try:
        return LocatorTable.from_json_file(path)
    except ValidationError as e:
        raise click.BadParameter(
            f"Invalid locator table in {path}:\n{e}",
            param_hint="--locators",
        ) from e


async def skip_failed_book(exception: TransportException) -> bool:
    """on_book_fetch_error callback that skips the book and continues."""
    logger.warning(f"Skipping book page {exception.url}: {exception.message}")
    return True


@click.group()
@click.version_option(package_name="readsgood")
def cli() -> None:
    """Export Goodreads Listopia lists to CSV."""


@cli.command()
@click.option(
    "--url",
    prompt="Provide the listopia url you would like to export",
    callback=validate_listing_url,
    help=f"Listopia list url, starting with {GOODREADS_LIST_PREFIX}",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    prompt="Provide the name of your csv file: e.g. `books.csv`",
    callback=validate_filename,
    help="CSV file to write.",
)
@click.option(
    "--pages",
    "page_count",
    type=click.IntRange(1, MAX_PAGES),
    default=1,
    show_default=True,
    prompt=f"How many pages would you like to export (1-{MAX_PAGES})",
    help="Number of listing pages to scrape.",
)
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    envvar="READSGOOD_TIMEOUT",
    help="Per-request timeout in seconds.",
)
@click.option(
    "--locators",
    "locators_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    envvar="READSGOOD_LOCATORS",
    help="JSON file overriding the CSS locator table.",
)
@click.option(
    "--skip-failed-books",
    is_flag=True,
    help="Skip book pages that cannot be fetched instead of aborting.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def export(
    url: str,
    output_path: Path,
    page_count: int,
    timeout: float,
    locators_path: Path | None,
    skip_failed_books: bool,
    verbose: bool,
) -> None:
    """Scrape a Listopia list and export its books to CSV.

    \b
    Examples:
        readsgood export --url https://www.goodreads.com/list/show/1.Best_Books_Ever \\
            --output books.csv --pages 2
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    scraper = GoodreadsScraper(locators=load_locators(locators_path))

    async def _go() -> list[Book]:
        async with AsyncRequestManager(timeout=timeout) as manager:
            driver = AsyncDriver(
                scraper=scraper,
                request_manager=manager,
                on_book_fetch_error=skip_failed_book
                if skip_failed_books
                else None,
            )
            return await export_books(
                url, output_path, page_count, driver=driver
            )

    try:
        books = asyncio.run(_go())
    except TransportException as e:
        raise click.ClickException(
            f"Unable to retrieve {e.url} ({e.message}); "
            f"no file was written"
        ) from e

    click.echo(f"Exported {len(books)} books to {output_path}")


@cli.command()
@click.option(
    "--locators",
    "locators_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    envvar="READSGOOD_LOCATORS",
    help="JSON file overriding the CSS locator table.",
)
def locators(locators_path: Path | None) -> None:
    """Print the active CSS locator table as JSON."""
    table = load_locators(locators_path)
    click.echo(table.model_dump_json(indent=2))


def main() -> None:
    """Entry point for the ``readsgood`` console script."""
    cli()
