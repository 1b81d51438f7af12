"""
Goodreads Listopia exporter.

This package scrapes a paginated Listopia list and each of its book pages,
keeping a clean separation between parsing (GoodreadsScraper) and I/O
(AsyncDriver and AsyncRequestManager), and writes the surviving books to a
CSV file.
"""
