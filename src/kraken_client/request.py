"""Request assembly for Kraken REST calls."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from kraken_client.auth import ApiCredentials, AuthSigner, SignedPayload
from kraken_client.constants import (
    API_VERSION,
    FORM_CONTENT_TYPE,
    USER_AGENT,
    default_rest_base_url,
)
from kraken_client.endpoints import EndpointKind, endpoint_path
from kraken_client.errors import HeaderError

_FORBIDDEN_HEADER_CHARS = re.compile(r"[\x00-\x1f\x7f]")


@dataclass
class RestRequest:
    kind: EndpointKind
    endpoint: str
    params: Mapping[str, Any] | None = None


@dataclass
class PreparedRequest:
    method: str
    url: str
    path: str
    headers: dict[str, str]
    body: bytes
    signed: SignedPayload | None = field(default=None, repr=False)


def validate_header_value(name: str, value: str) -> str:
    """Reject values that cannot be sent as an HTTP header; never echoes the value."""
    if _FORBIDDEN_HEADER_CHARS.search(value):
        raise HeaderError(f"Header {name} contains control characters")
    try:
        value.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise HeaderError(f"Header {name} contains non latin-1 characters") from exc
    return value


class RequestBuilder:
    """Composes URL, headers and body for public and private endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        signer: AuthSigner | None = None,
        api_version: str = API_VERSION,
        user_agent: str = USER_AGENT,
    ) -> None:
        self.base_url = (base_url or default_rest_base_url()).rstrip("/")
        self.signer = signer or AuthSigner()
        self.api_version = api_version
        self.user_agent = user_agent

    def build_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def build(
        self, request: RestRequest, credentials: ApiCredentials | None = None
    ) -> PreparedRequest:
        path = endpoint_path(request.kind, request.endpoint, self.api_version)
        params = request.params or {}
        headers = {
            "User-Agent": self.user_agent,
            "Content-Type": FORM_CONTENT_TYPE,
        }
        signed = None
        if request.kind is EndpointKind.PRIVATE:
            signed = self.signer.sign_payload(credentials, path, params)
            body = signed.body
            headers.update(signed.headers)
        else:
            body = self.signer.serialize_payload(params)
            if credentials is not None and credentials.api_key:
                headers["API-Key"] = credentials.api_key
        for name, value in headers.items():
            validate_header_value(name, value)
        return PreparedRequest(
            method="POST",
            url=self.build_url(path),
            path=path,
            headers=headers,
            body=body,
            signed=signed,
        )
