"""Exception hierarchy for EDGAR fetching and scheduling."""

from __future__ import annotations


class EdgarError(Exception):
    """Base exception for all errors raised by :mod:`etf_holdings`."""


class ConfigurationError(EdgarError):
    """Raised when a client or command is constructed with invalid settings."""


class FetchError(EdgarError):
    """Raised when a request to EDGAR did not produce a usable response."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class BadStatusError(FetchError):
    """Raised when EDGAR answers with a status code outside 200-299."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Non-2xx answer: {status_code} (url={url})", url)
        self.status_code = status_code


class TransportError(FetchError):
    """Raised when the request failed before any response was received."""


class DecodeError(EdgarError):
    """Raised when a response body cannot be decoded into the expected shape."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message if url is None else f"{message} (url={url})")
        self.url = url


class BoundaryNotFoundError(EdgarError):
    """Raised when no filing-date boundary fits even a fully replenished quota."""
