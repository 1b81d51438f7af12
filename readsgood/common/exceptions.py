"""Exception types for transport failures.

Missing or malformed markup is never an exception in this package: field
extraction degrades to ``None`` and incomplete book pages are dropped. The
only errors that surface from a run are failures to retrieve a listing page
or a book page.
"""

from typing import Any


class TransportException(Exception):
    """A URL could not be turned into a document.

    Attributes:
        url: The URL that could not be retrieved.
        message: Short description of the failure, without the URL.
        context: Details such as the status code or the timeout.
    """

    def __init__(
        self,
        message: str,
        url: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.url = url
        self.context = dict(context) if context else {}
        super().__init__(self._describe())

    def _describe(self) -> str:
        lines = [self.message, f"URL: {self.url}"]
        if self.context:
            lines.append("Context:")
            lines.extend(f"  {key}: {value}" for key, value in self.context.items())
        return "\n".join(lines)


class HTMLResponseAssumptionException(TransportException):
    """The server answered with a 5xx status code.

    A 4xx answer is not raised; its body is parsed like any other page and
    yields no book fields.

    Attributes:
        status_code: Status code of the response.
        expected_codes: Status codes the caller was prepared to accept.
    """

    def __init__(
        self, status_code: int, expected_codes: list[int], url: str
    ) -> None:
        self.status_code = status_code
        self.expected_codes = expected_codes
        accepted = ", ".join(map(str, expected_codes))
        super().__init__(
            f"HTTP {status_code} (expected one of: {accepted})",
            url,
            {"status_code": status_code},
        )


class RequestTimeoutException(TransportException):
    """No response arrived within the request timeout."""

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Request timed out after {timeout_seconds}s",
            url,
            {"timeout_seconds": timeout_seconds},
        )


class RequestFailedException(TransportException):
    """The connection failed: DNS lookup, refused or reset connection, etc.

    Attributes:
        reason: Message of the underlying transport error.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.reason = reason
        super().__init__("Request failed", url, {"reason": reason})
