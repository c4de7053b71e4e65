"""Async REST client implementation for the Kraken exchange API."""

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any, Mapping

import aiohttp

from kraken_client.auth import ApiCredentials, AuthSigner
from kraken_client.constants import API_VERSION, DEFAULT_TIMEOUT, USER_AGENT
from kraken_client.endpoints import EndpointKind, EndpointMethods, endpoint_kind
from kraken_client.errors import TransportError
from kraken_client.request import PreparedRequest, RequestBuilder, RestRequest
from kraken_client.response import classify_response
from kraken_client.rest import (
    build_ssl_context,
    debug_auth_enabled,
    log_signed_request,
)

LOGGER = logging.getLogger("kraken_client.async_rest")


class AsyncRestClient(EndpointMethods):
    """Async Kraken REST client sharing the request and classification path."""

    def __init__(
        self,
        base_url: str | None = None,
        credentials: ApiCredentials | None = None,
        signer: AuthSigner | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_version: str = API_VERSION,
        user_agent: str = USER_AGENT,
        debug_auth: bool | None = None,
        session: aiohttp.ClientSession | None = None,
        verify_ssl: bool = True,
        ssl_context: ssl.SSLContext | None = None,
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
        self._session = session
        self._owns_session = session is None

    @property
    def base_url(self) -> str:
        return self.builder.base_url

    @property
    def signer(self) -> AuthSigner:
        return self.builder.signer

    async def __aenter__(self) -> "AsyncRestClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def public(
        self, endpoint: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return await self.send(RestRequest(EndpointKind.PUBLIC, endpoint, params))

    async def private(
        self, endpoint: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return await self.send(RestRequest(EndpointKind.PRIVATE, endpoint, params))

    async def call(
        self, endpoint: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return await self.send(
            RestRequest(endpoint_kind(endpoint), endpoint, params)
        )

    async def send(self, request: RestRequest) -> Any:
        # Building and signing happen before any I/O, so credential errors
        # never open a session.
        prepared = self.builder.build(request, self.credentials)
        if self.debug_auth:
            log_signed_request(LOGGER, prepared)
        LOGGER.debug("POST %s", prepared.url)
        status, body, headers = await self._transmit(prepared)
        LOGGER.debug("HTTP %s from %s", status, prepared.path)
        return classify_response(status, body, headers)

    async def _transmit(
        self, prepared: PreparedRequest
    ) -> tuple[int, bytes, Mapping[str, str]]:
        session = await self._ensure_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with session.request(
                prepared.method,
                prepared.url,
                headers=prepared.headers,
                data=prepared.body,
                timeout=timeout,
            ) as response:
                body = await response.read()
                return response.status, body, response.headers
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(
                f"Network error while contacting {prepared.path}"
            ) from exc

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            connector = aiohttp.TCPConnector(ssl=self._ssl_context)
            self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)
            self._owns_session = True
        return self._session
