"""Kraken REST endpoint catalogue and per-endpoint convenience methods."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Mapping

from kraken_client.constants import API_VERSION
from kraken_client.models import OrderRequest


class EndpointKind(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


PUBLIC_ENDPOINTS = (
    "Assets",
    "AssetPairs",
    "Ticker",
    "OHLC",
    "Depth",
    "Trades",
    "Spread",
)

PRIVATE_ENDPOINTS = (
    "Balance",
    "TradeBalance",
    "OpenOrders",
    "ClosedOrders",
    "QueryOrders",
    "TradesHistory",
    "QueryTrades",
    "OpenPositions",
    "Ledgers",
    "QueryLedgers",
    "TradeVolume",
    "AddOrder",
    "CancelOrder",
    "CancelAll",
    "CancelAllOrdersAfter",
    "AddExport",
    "ExportStatus",
    "RetrieveExport",
    "RemoveExport",
)

ENDPOINTS: dict[str, EndpointKind] = {
    **{name: EndpointKind.PUBLIC for name in PUBLIC_ENDPOINTS},
    **{name: EndpointKind.PRIVATE for name in PRIVATE_ENDPOINTS},
}


def endpoint_kind(name: str) -> EndpointKind:
    try:
        return ENDPOINTS[name]
    except KeyError:
        raise ValueError(f"Unknown Kraken endpoint: {name}") from None


def endpoint_path(
    kind: EndpointKind, name: str, api_version: str = API_VERSION
) -> str:
    """Return the URI path that is both requested and signed, e.g. ``/0/private/Balance``."""
    return f"/{api_version}/{kind.value}/{name}"


def _with(params: Mapping[str, Any] | None, **fixed: Any) -> dict[str, Any]:
    merged = dict(params or {})
    merged.update({key: value for key, value in fixed.items() if value is not None})
    return merged


class EndpointMethods(ABC):
    """Thin wrappers that route a fixed endpoint name through ``call``.

    Host classes provide ``call(endpoint, params)``; on the async client every
    wrapper therefore returns an awaitable.
    """

    @abstractmethod
    def call(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        """Dispatch ``endpoint`` as public or private according to ``ENDPOINTS``."""

    # Market data

    def assets(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("Assets", params)

    def asset_pairs(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("AssetPairs", params)

    def ticker(
        self, pair: str | None = None, params: Mapping[str, Any] | None = None
    ) -> Any:
        return self.call("Ticker", _with(params, pair=pair))

    def ohlc(self, pair: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("OHLC", _with(params, pair=pair))

    def depth(
        self,
        pair: str,
        count: int | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        return self.call("Depth", _with(params, pair=pair, count=count))

    def trades(self, pair: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("Trades", _with(params, pair=pair))

    def spread(self, pair: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("Spread", _with(params, pair=pair))

    # Account data

    def balance(self) -> Any:
        return self.call("Balance")

    def trade_balance(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("TradeBalance", params)

    def open_orders(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("OpenOrders", params)

    def closed_orders(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("ClosedOrders", params)

    def query_orders(
        self, txid: str | list[str], params: Mapping[str, Any] | None = None
    ) -> Any:
        return self.call("QueryOrders", _with(params, txid=txid))

    def trades_history(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("TradesHistory", params)

    def query_trades(
        self, txid: str | list[str], params: Mapping[str, Any] | None = None
    ) -> Any:
        return self.call("QueryTrades", _with(params, txid=txid))

    def open_positions(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("OpenPositions", params)

    def ledgers(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("Ledgers", params)

    def query_ledgers(
        self, ledger_id: str | list[str], params: Mapping[str, Any] | None = None
    ) -> Any:
        return self.call("QueryLedgers", _with(params, id=ledger_id))

    def trade_volume(self, params: Mapping[str, Any] | None = None) -> Any:
        return self.call("TradeVolume", params)

    # Trading

    def add_order(self, order: OrderRequest | Mapping[str, Any]) -> Any:
        payload = order.to_payload() if isinstance(order, OrderRequest) else order
        return self.call("AddOrder", payload)

    def cancel_order(self, txid: str) -> Any:
        return self.call("CancelOrder", {"txid": txid})

    def cancel_all(self) -> Any:
        return self.call("CancelAll")

    def cancel_all_orders_after(self, timeout: int) -> Any:
        return self.call("CancelAllOrdersAfter", {"timeout": timeout})

    # Exports

    def add_export(
        self, report: str, description: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return self.call(
            "AddExport", _with(params, report=report, description=description)
        )

    def export_status(self, report: str) -> Any:
        return self.call("ExportStatus", {"report": report})

    def retrieve_export(self, report_id: str) -> Any:
        return self.call("RetrieveExport", {"id": report_id})

    def remove_export(self, report_id: str, remove_type: str = "delete") -> Any:
        return self.call("RemoveExport", {"id": report_id, "type": remove_type})
