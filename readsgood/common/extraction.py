"""Field extraction with graceful degradation.

A field whose locator matches nothing is an expected, recoverable
condition: ``extract`` returns ``None`` rather than raising, and the
post-processors below pass ``None`` straight through. Callers decide what
an absent field means for the record as a whole.
"""

from __future__ import annotations

from readsgood.common.locators import Locator
from readsgood.common.page_element import PageElement

# UI "expand" affordances rendered among the genre labels
GENRE_SENTINELS = frozenset({"...more", "\u2026more"})

NBSP = "\u00a0"
_THOUSANDS_SEPARATORS = (",", "\u202f", "\u2009")


def extract(page: PageElement, locator: Locator) -> str | None:
    """Return the text of the first node matching a locator.

    Args:
        page: Parsed document or element to query.
        locator: Field locator to apply.

    Returns:
        Concatenated text content of the first match in document order, or
        None if nothing matches.
    """
    matches = page.query_css(locator.selector, locator.field)
    if not matches:
        return None
    return matches[0].text_content()


def extract_all(page: PageElement, locator: Locator) -> list[str]:
    """Return the text of every node matching a locator.

    Sentinel placeholders such as ``"...more"`` are dropped since they are
    never real values.

    Args:
        page: Parsed document or element to query.
        locator: Field locator to apply.

    Returns:
        Text of each match in document order, possibly empty.
    """
    texts = (
        match.text_content()
        for match in page.query_css(locator.selector, locator.field)
    )
    return [text for text in texts if text.strip() not in GENRE_SENTINELS]


def first_token(text: str | None) -> str | None:
    """Keep the token before the first space.

    ``"312 pages"`` becomes ``"312"``.

    Args:
        text: Raw extracted text, or None.

    Returns:
        The leading token, or None if the input is absent or the token is
        empty.
    """
    if text is None:
        return None
    token = text.strip().split(" ", 1)[0]
    return token or None


def publication_date(text: str | None) -> str | None:
    """Strip the "First published" / "Published" prefix from a date line.

    The site does not always say "First published", so plain "Published"
    is accepted as a fallback.

    Args:
        text: Raw publication info line, or None.

    Returns:
        The trimmed text after the phrase, or None if the input is absent or
        contains neither phrase.
    """
    if text is None:
        return None
    for phrase in ("First published", "Published"):
        if phrase in text:
            date = text.split(phrase, 1)[1].strip()
            return date or None
    return None


def count(text: str | None) -> str | None:
    """Normalize a "1,234 ratings" style counter to ``"1234"``.

    Args:
        text: Raw counter text, or None.

    Returns:
        The leading number with thousands separators removed, or None if the
        input is absent or empty.
    """
    if text is None:
        return None
    token = text.strip().split(NBSP, 1)[0]
    for separator in _THOUSANDS_SEPARATORS:
        token = token.replace(separator, "")
    token = token.strip()
    return token or None
