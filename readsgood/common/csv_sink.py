"""CSV sink for scraped books."""

from __future__ import annotations

import csv
import logging
from collections.abc import Sequence
from pathlib import Path

from readsgood.data_types import CSV_HEADER, Book

logger = logging.getLogger(__name__)


def write_books(
    path: Path,
    books: Sequence[Book],
    header: Sequence[str] = CSV_HEADER,
) -> None:
    """Write books to a CSV file, header first.

    The file is only opened here, once the complete set of books is known.

    Args:
        path: Destination file. Overwritten if it exists.
        books: Books in output order.
        header: Column names; must match ``Book.to_row`` order.
    """
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for book in books:
            logger.debug(
                f"Writing book '{book.title}' by '{book.author}' to {path}"
            )
            writer.writerow(book.to_row())

    logger.info(f"Wrote {len(books)} books to {path}")
