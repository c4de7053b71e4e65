"""Exception hierarchy for Kraken REST clients."""

from __future__ import annotations

from typing import Sequence


class KrakenError(Exception):
    """Base exception for Kraken client errors."""


class MissingApiKeyError(KrakenError):
    """Raised when a private call is attempted without an API key."""

    def __init__(self, message: str = "Missing API key") -> None:
        super().__init__(message)


class MissingApiSecretError(KrakenError):
    """Raised when a private call is attempted without an API secret."""

    def __init__(self, message: str = "Missing API secret") -> None:
        super().__init__(message)


class SignatureError(KrakenError):
    """Raised when the request signature cannot be generated."""


class EncodingError(KrakenError):
    """Raised when request parameters cannot be form-encoded."""


class HeaderError(KrakenError):
    """Raised when a header value cannot be sent over HTTP."""


class TransportError(KrakenError):
    """Raised when the HTTP exchange itself fails (DNS, connect, TLS, timeout)."""


class BadBodyError(KrakenError):
    """Raised when the response body is not the expected JSON envelope."""

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(message)
        self.body = body


class RateLimitError(KrakenError):
    """Raised when the API answers with HTTP 429."""

    def __init__(self, body: str, retry_after: float | None = None) -> None:
        super().__init__(body)
        self.body = body
        self.retry_after = retry_after


class ExchangeError(KrakenError):
    """Raised when the response carries entries in its ``error`` array."""

    def __init__(self, errors: Sequence[str], body: str = "") -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)
        self.body = body


class UnexpectedStatusError(KrakenError):
    """Raised for HTTP statuses other than 200 and 429."""

    def __init__(self, status_code: int, body: str = "") -> None:
        message = f"HTTP error {status_code}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body
