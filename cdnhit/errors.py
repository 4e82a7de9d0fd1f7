"""Exception hierarchy for cdnhit."""

from __future__ import annotations

from typing import Optional


class CdnHitError(Exception):
    """Base class for all cdnhit errors."""


class ConfigError(CdnHitError):
    """The settings source is missing, unreadable or malformed."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class TransportError(CdnHitError):
    """A request failed below HTTP (connect, DNS, timeout, protocol)."""

    def __init__(self, destination: str, url: str, cause: BaseException) -> None:
        self.destination = destination
        self.url = url
        self.cause = cause
        reason = str(cause) or type(cause).__name__
        super().__init__(f"GET {url} failed for {destination!r}: {reason}")


class HttpStatusFailure(CdnHitError):
    """A probe returned a non-2xx status; sampling for that destination stops."""

    def __init__(self, destination: str, status_code: int) -> None:
        self.destination = destination
        self.status_code = status_code
        super().__init__(f"{destination!r} returned HTTP {status_code}")


class HeaderDecodeFailure(CdnHitError):
    """A header value is not valid text."""

    def __init__(self, header_key: str) -> None:
        self.header_key = header_key
        super().__init__(f"header {header_key!r} has a non-text value")
