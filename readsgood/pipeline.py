"""End-to-end export: scrape a listing, then write the CSV.

The CSV is written only after the driver has returned every book. If the
driver fails, nothing is written, so a partial export is never produced.
"""

from __future__ import annotations

import logging
from pathlib import Path

from readsgood.common.csv_sink import write_books
from readsgood.common.exceptions import TransportException
from readsgood.data_types import Book
from readsgood.driver.async_driver import AsyncDriver

logger = logging.getLogger(__name__)


async def export_books(
    url: str,
    output_path: Path,
    page_count: int,
    driver: AsyncDriver | None = None,
) -> list[Book]:
    """Scrape ``page_count`` pages of a listing and write them to CSV.

    Args:
        url: Validated listing URL without a page parameter.
        output_path: Destination CSV file.
        page_count: Number of listing pages to scrape.
        driver: Driver to use. Defaults to an AsyncDriver with the standard
            scraper and request manager.

    Returns:
        The books that were written.

    Raises:
        TransportException: If any page could not be fetched. No file is
            written in that case.
    """
    driver = driver or AsyncDriver()

    try:
        books = await driver.run(url, page_count)
    except TransportException as e:
        logger.error(
            f"Export aborted, nothing written to {output_path}: {e.message}",
            extra={"request_url": e.url},
        )
        raise

    write_books(output_path, books)
    return books
