"""Tests for order and envelope models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kraken_client.models import OrderRequest, ResponseEnvelope


def test_order_payload_includes_only_set_fields() -> None:
    order = OrderRequest(
        pair="XBTUSD",
        type="sell",
        ordertype="stop-loss-limit",
        volume="0.5",
        price="30000",
        price2="29900",
        oflags="post,fciq",
        userref=17,
        validate_only=True,
    )

    assert order.to_payload() == {
        "ordertype": "stop-loss-limit",
        "pair": "XBTUSD",
        "type": "sell",
        "volume": "0.5",
        "price": "30000",
        "price2": "29900",
        "oflags": "post,fciq",
        "userref": "17",
        "validate": "true",
    }


@pytest.mark.parametrize(
    "overrides",
    [
        {"type": "hold"},
        {"ordertype": "iceberg"},
        {"volume": "0"},
        {"volume": "-1"},
        {"volume": "abc"},
        {"price": "NaN"},
    ],
)
def test_order_rejects_invalid_fields(overrides: dict[str, str]) -> None:
    fields = {"pair": "XBTUSD", "type": "buy", "ordertype": "limit", "volume": "1"}
    fields.update(overrides)

    with pytest.raises(ValidationError):
        OrderRequest(**fields)


def test_envelope_defaults_result() -> None:
    envelope = ResponseEnvelope.model_validate({"error": []})

    assert envelope.result is None


def test_order_amounts_are_sent_in_positional_notation() -> None:
    order = OrderRequest(
        pair="XBTUSD", type="buy", ordertype="limit", volume=0.00001, price="1E+4"
    )

    payload = order.to_payload()

    assert payload["volume"] == "0.00001"
    assert payload["price"] == "10000"


def test_order_accepts_validate_by_wire_name() -> None:
    order = OrderRequest(
        pair="XBTUSD", type="buy", ordertype="market", volume="1", validate=False
    )

    assert order.validate_only is False
    assert order.to_payload()["validate"] == "false"
