"""Tests for the async REST client."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
import pytest

from kraken_client.async_rest import AsyncRestClient
from kraken_client.auth import ApiCredentials, AuthSigner, NonceSource
from kraken_client.errors import (
    ExchangeError,
    MissingApiSecretError,
    RateLimitError,
    TransportError,
)

SECRET = "kQH5HW/8p1uGOVjbgWA7FunAmGO8lsSUXNsu3eow76sz84Q18fWxnyRzBHCd3pd5nE9qa99HAZtuZuj6F1huXg=="


class FakeResponse:
    def __init__(
        self,
        status: int,
        payload: Any,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status = status
        self._payload = payload
        self.headers = headers or {}

    async def read(self) -> bytes:
        if isinstance(self._payload, bytes):
            return self._payload
        return json.dumps(self._payload).encode("utf8")

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class FakeSession:
    def __init__(self, responses: list[FakeResponse | Exception]) -> None:
        self.responses = responses
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: bytes | None = None,
        timeout: Any | None = None,
    ) -> FakeResponse:
        self.requests.append(
            {
                "method": method,
                "url": url,
                "headers": headers or {},
                "data": data,
                "timeout": timeout,
            }
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


def _client(
    session: FakeSession, credentials: ApiCredentials | None = None
) -> AsyncRestClient:
    signer = AuthSigner(nonce_source=NonceSource(time_provider=lambda: 1700000000.0))
    return AsyncRestClient(
        base_url="https://api.example",
        credentials=credentials,
        signer=signer,
        session=session,
    )


@pytest.mark.asyncio
async def test_async_private_call_signing_and_request_formation() -> None:
    session = FakeSession([FakeResponse(200, {"error": [], "result": {"ZUSD": "5"}})])
    client = _client(session, ApiCredentials(api_key="test-key", api_secret=SECRET))

    result = await client.trade_balance({"asset": "ZUSD"})

    assert result == {"ZUSD": "5"}
    request = session.requests[0]
    assert request["method"] == "POST"
    assert request["url"] == "https://api.example/0/private/TradeBalance"
    assert request["data"] == b"nonce=1700000000000&asset=ZUSD"
    expected_signature = client.signer.sign(
        "/0/private/TradeBalance", 1700000000000, request["data"], SECRET
    )
    assert request["headers"]["API-Key"] == "test-key"
    assert request["headers"]["API-Sign"] == expected_signature
    assert request["timeout"].total == 10.0


@pytest.mark.asyncio
async def test_async_public_call() -> None:
    session = FakeSession([FakeResponse(200, {"error": [], "result": {"XBT": {}}})])
    client = _client(session)

    result = await client.public("Assets", {"asset": "XBT"})

    assert result == {"XBT": {}}
    request = session.requests[0]
    assert request["url"] == "https://api.example/0/public/Assets"
    assert "API-Sign" not in request["headers"]


@pytest.mark.asyncio
async def test_async_rate_limit_is_not_retried() -> None:
    session = FakeSession(
        [FakeResponse(429, b"Too many requests", headers={"Retry-After": "1.5"})]
    )
    client = _client(session)

    with pytest.raises(RateLimitError) as excinfo:
        await client.assets()

    assert excinfo.value.retry_after == 1.5
    assert len(session.requests) == 1


@pytest.mark.asyncio
async def test_async_exchange_error() -> None:
    session = FakeSession(
        [FakeResponse(200, {"error": ["EOrder:Insufficient funds"], "result": {}})]
    )
    client = _client(session, ApiCredentials(api_key="key", api_secret=SECRET))

    with pytest.raises(ExchangeError) as excinfo:
        await client.add_order(
            {"pair": "XBTUSD", "type": "buy", "ordertype": "market", "volume": "1"}
        )

    assert excinfo.value.errors == ["EOrder:Insufficient funds"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure", [asyncio.TimeoutError(), aiohttp.ClientConnectionError("refused")]
)
async def test_async_transport_failures(failure: Exception) -> None:
    session = FakeSession([failure])
    client = _client(session)

    with pytest.raises(TransportError):
        await client.spread("XBTUSD")


@pytest.mark.asyncio
async def test_async_missing_secret_skips_network() -> None:
    session = FakeSession([])
    client = _client(session, ApiCredentials(api_key="key"))

    with pytest.raises(MissingApiSecretError):
        await client.balance()

    assert session.requests == []


@pytest.mark.asyncio
async def test_async_injected_session_is_not_closed() -> None:
    session = FakeSession([])

    async with _client(session):
        pass

    assert session.closed is False


@pytest.mark.asyncio
async def test_async_concurrent_private_calls_use_distinct_nonces() -> None:
    responses = [FakeResponse(200, {"error": [], "result": {}}) for _ in range(5)]
    session = FakeSession(responses)
    client = _client(session, ApiCredentials(api_key="key", api_secret=SECRET))

    await asyncio.gather(*(client.balance() for _ in range(5)))

    bodies = {request["data"] for request in session.requests}
    assert len(bodies) == 5
