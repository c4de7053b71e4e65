"""REST client implementation for the Kraken exchange API."""

from __future__ import annotations

import http.client
import logging
import os
import ssl
from typing import Any, Mapping
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from kraken_client.auth import ApiCredentials, AuthSigner
from kraken_client.constants import API_VERSION, DEFAULT_TIMEOUT, USER_AGENT
from kraken_client.endpoints import EndpointKind, EndpointMethods, endpoint_kind
from kraken_client.errors import TransportError
from kraken_client.request import PreparedRequest, RequestBuilder, RestRequest
from kraken_client.response import classify_response

LOGGER = logging.getLogger("kraken_client.rest")


def debug_auth_enabled(debug_auth: bool | None) -> bool:
    if debug_auth is not None:
        return debug_auth
    return os.getenv("KRAKEN_DEBUG_AUTH") == "1"


def build_ssl_context(
    verify_ssl: bool, ssl_context: ssl.SSLContext | None
) -> ssl.SSLContext:
    if ssl_context is not None:
        return ssl_context
    if verify_ssl:
        return ssl.create_default_context()
    logging.warning(
        "SSL certificate verification is DISABLED. "
        "This should NEVER be used in production environments."
    )
    return ssl._create_unverified_context()


def log_signed_request(logger: logging.Logger, prepared: PreparedRequest) -> None:
    signed = prepared.signed
    if signed is None:
        return
    logger.debug(
        "Signed request url=%s nonce=%s body=%s signature=[REDACTED - %d chars] "
        "api_key=[REDACTED - %d chars]",
        prepared.url,
        signed.nonce,
        signed.body.decode("ascii"),
        len(signed.signature),
        len(signed.headers.get("API-Key", "")),
    )


class RestClient(EndpointMethods):
    """Synchronous Kraken REST client; one encode/sign/send/classify pass per call."""

    def __init__(
        self,
        base_url: str | None = None,
        credentials: ApiCredentials | None = None,
        signer: AuthSigner | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_version: str = API_VERSION,
        user_agent: str = USER_AGENT,
        debug_auth: bool | None = None,
        verify_ssl: bool = True,  # Enable SSL certificate verification
        ssl_context: ssl.SSLContext | None = None,  # Custom SSL context
    ) -> None:
        self.credentials = credentials
        self.builder = RequestBuilder(
            base_url,
            signer=signer,
            api_version=api_version,
            user_agent=user_agent,
        )
        self.timeout = timeout
        self.debug_auth = debug_auth_enabled(debug_auth)
        self._ssl_context = build_ssl_context(verify_ssl, ssl_context)

    @property
    def base_url(self) -> str:
        return self.builder.base_url

    @property
    def signer(self) -> AuthSigner:
        return self.builder.signer

    def public(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.send(RestRequest(EndpointKind.PUBLIC, endpoint, params))

    def private(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.send(RestRequest(EndpointKind.PRIVATE, endpoint, params))

    def call(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.send(RestRequest(endpoint_kind(endpoint), endpoint, params))

    def send(self, request: RestRequest) -> Any:
        prepared = self.builder.build(request, self.credentials)
        if self.debug_auth:
            log_signed_request(LOGGER, prepared)
        LOGGER.debug("POST %s", prepared.url)
        status, body, headers = self._transmit(prepared)
        LOGGER.debug("HTTP %s from %s", status, prepared.path)
        return classify_response(status, body, headers)

    def _transmit(
        self, prepared: PreparedRequest
    ) -> tuple[int, bytes, Mapping[str, str]]:
        http_request = Request(
            url=prepared.url,
            method=prepared.method,
            headers=prepared.headers,
            data=prepared.body,
        )
        try:
            with urlopen(
                http_request, timeout=self.timeout, context=self._ssl_context
            ) as response:
                return response.status, response.read(), response.headers
        except HTTPError as exc:
            # Non-2xx answers still carry a status and body worth classifying.
            try:
                payload = exc.read() if exc.fp else b""
            except (OSError, http.client.HTTPException) as read_exc:
                raise TransportError(
                    f"Network error while reading HTTP {exc.code} body from "
                    f"{prepared.path}"
                ) from read_exc
            return exc.code, payload, exc.headers or {}
        except (URLError, OSError, http.client.HTTPException) as exc:
            raise TransportError(
                f"Network error while contacting {prepared.path}"
            ) from exc
