"""Classification of raw Kraken REST responses."""

from __future__ import annotations

import json
from typing import Any, Mapping

from pydantic import ValidationError

from kraken_client.errors import (
    BadBodyError,
    ExchangeError,
    RateLimitError,
    UnexpectedStatusError,
)
from kraken_client.models import ResponseEnvelope

BINARY_CONTENT_TYPES = frozenset({"application/octet-stream", "application/zip"})


def classify_response(
    status_code: int,
    body: bytes,
    headers: Mapping[str, str] | None = None,
) -> Any:
    """Return the ``result`` of a successful response or raise a ``KrakenError``.

    - 429 is always a rate limit, whatever the body looks like.
    - 200 must carry a JSON object with an ``error`` array; a non-empty array
      is an exchange error, an empty one yields ``result``.
    - 200 with a binary content type (export archives) returns the raw bytes.
    - Any other status is an ``UnexpectedStatusError``.
    """
    text = body.decode("utf8", errors="replace")
    headers = headers or {}
    if status_code == 429:
        raise RateLimitError(
            text, retry_after=_parse_retry_after(_header(headers, "Retry-After"))
        )
    if status_code != 200:
        raise UnexpectedStatusError(status_code, text)

    content_type = (_header(headers, "Content-Type") or "").split(";")[0].strip()
    if content_type.lower() in BINARY_CONTENT_TYPES:
        return body

    try:
        strict_text = body.decode("utf8")
    except UnicodeDecodeError as exc:
        raise BadBodyError("Response body is not valid UTF-8", text) from exc
    try:
        parsed = json.loads(strict_text)
    except json.JSONDecodeError as exc:
        raise BadBodyError("Response body is not valid JSON", text) from exc
    if not isinstance(parsed, dict) or "error" not in parsed:
        raise BadBodyError("Response body has no error array", text)
    try:
        envelope = ResponseEnvelope.model_validate(parsed)
    except ValidationError as exc:
        raise BadBodyError("Response error field is malformed", text) from exc
    if envelope.error:
        raise ExchangeError(envelope.error, text)
    if "result" not in parsed:
        raise BadBodyError("Response body has no result", text)
    return envelope.result


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def _parse_retry_after(header_value: str | None) -> float | None:
    if header_value is None:
        return None
    try:
        return float(header_value)
    except ValueError:
        return None
