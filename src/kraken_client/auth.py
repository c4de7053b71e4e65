"""Authentication helpers for the Kraken REST API."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import threading
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Mapping
from urllib.parse import urlencode

from kraken_client.errors import (
    EncodingError,
    MissingApiKeyError,
    MissingApiSecretError,
    SignatureError,
)


@dataclass(frozen=True)
class ApiCredentials:
    api_key: str | None = None
    api_secret: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class SignedPayload:
    path: str
    nonce: int
    body: bytes
    signature: str
    headers: dict[str, str]


class NonceSource:
    """Issues millisecond nonces that never repeat for one signer.

    The wall clock seeds every value, but two calls landing in the same
    millisecond (or a clock stepping backwards) still get distinct,
    increasing nonces.
    """

    def __init__(self, time_provider: Callable[[], float] | None = None) -> None:
        self._time_provider = time_provider or time.time
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            nonce = max(int(self._time_provider() * 1000), self._last + 1)
            self._last = nonce
            return nonce


def require_credentials(credentials: ApiCredentials | None) -> tuple[str, str]:
    if credentials is None or not credentials.api_key:
        raise MissingApiKeyError()
    if not credentials.api_secret:
        raise MissingApiSecretError()
    return credentials.api_key, credentials.api_secret


class AuthSigner:
    """Encodes and signs private Kraken REST requests."""

    def __init__(
        self,
        time_provider: Callable[[], float] | None = None,
        *,
        nonce_source: NonceSource | None = None,
        sort_params: bool = False,
    ) -> None:
        self.nonce_source = nonce_source or NonceSource(time_provider)
        self._sort_params = sort_params

    def generate_nonce(self) -> int:
        return self.nonce_source.next()

    def serialize_payload(self, params: Mapping[str, Any]) -> bytes:
        """Form-encode ``params``; the result is both the body and the signed data."""
        items = sorted(params.items()) if self._sort_params else params.items()
        pairs: list[tuple[str, str]] = []
        for key, value in items:
            if not isinstance(key, str) or not key:
                raise EncodingError(f"Invalid parameter name: {key!r}")
            pairs.append((key, _encode_value(key, value)))
        return urlencode(pairs).encode("ascii")

    def merge_nonce(self, params: Mapping[str, Any], nonce: int) -> dict[str, Any]:
        merged: dict[str, Any] = {"nonce": str(nonce)}
        for key, value in params.items():
            if key != "nonce":
                merged[key] = value
        return merged

    def sign(
        self, path: str, nonce: int, encoded_payload: bytes, api_secret: str
    ) -> str:
        """Return base64(HMAC-SHA512(b64decode(secret), path + SHA256(nonce + payload)))."""
        message = str(nonce).encode("ascii") + encoded_payload
        digest = hashlib.sha256(message).digest()
        try:
            secret_bytes = base64.b64decode(api_secret, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise SignatureError("API secret is not valid base64") from exc
        try:
            mac = hmac.new(secret_bytes, path.encode("utf8") + digest, hashlib.sha512)
        except (TypeError, ValueError) as exc:
            raise SignatureError("Unable to initialise HMAC with API secret") from exc
        return base64.b64encode(mac.digest()).decode("ascii")

    def sign_payload(
        self,
        credentials: ApiCredentials | None,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> SignedPayload:
        api_key, api_secret = require_credentials(credentials)
        nonce = self.generate_nonce()
        body = self.serialize_payload(self.merge_nonce(params or {}, nonce))
        signature = self.sign(path, nonce, body, api_secret)
        return SignedPayload(
            path=path,
            nonce=nonce,
            body=body,
            signature=signature,
            headers={"API-Key": api_key, "API-Sign": signature},
        )


def _encode_value(key: str, value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(_encode_scalar(key, item) for item in value)
    return _encode_scalar(key, value)


def _encode_scalar(key: str, value: Any) -> str:
    # bool first: it is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        # positional notation; the exchange rejects exponents such as 1e-05
        return format(Decimal(str(value)), "f")
    raise EncodingError(
        f"Unsupported value for parameter '{key}': {type(value).__name__}"
    )
