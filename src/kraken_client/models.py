"""Shared data models for Kraken clients."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ORDER_SIDES = frozenset({"buy", "sell"})
ORDER_TYPES = frozenset(
    {
        "market",
        "limit",
        "stop-loss",
        "take-profit",
        "stop-loss-limit",
        "take-profit-limit",
        "settle-position",
    }
)


class ResponseEnvelope(BaseModel):
    """Top-level JSON shape of every Kraken REST response."""

    model_config = ConfigDict(frozen=True)

    error: list[str]
    result: Any = None


class OrderRequest(BaseModel):
    """Parameters for the private ``AddOrder`` endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pair: str
    type: str
    ordertype: str
    volume: str
    price: str | None = None
    price2: str | None = None
    leverage: str | None = None
    oflags: str | None = None
    starttm: str | None = None
    expiretm: str | None = None
    userref: int | None = None
    validate_only: bool | None = Field(default=None, alias="validate")

    @field_validator("type")
    @classmethod
    def validate_side(cls, v: str) -> str:
        if v not in ORDER_SIDES:
            raise ValueError(f"Invalid order side: {v}")
        return v

    @field_validator("ordertype")
    @classmethod
    def validate_ordertype(cls, v: str) -> str:
        if v not in ORDER_TYPES:
            raise ValueError(f"Invalid order type: {v}")
        return v

    @field_validator("volume", "price", "price2", mode="before")
    @classmethod
    def validate_amounts(cls, v: Any) -> str | None:
        """Validate amounts are valid positive decimals."""
        if v is None:
            return None
        try:
            decimal_val = Decimal(str(v))
        except (InvalidOperation, ValueError, TypeError) as e:
            raise ValueError(f"Invalid amount: {v}") from e
        if not decimal_val.is_finite() or decimal_val <= 0:
            raise ValueError("Amount must be positive")
        return format(decimal_val, "f")

    def to_payload(self) -> dict[str, str]:
        """Convert to API request payload."""
        payload = {
            "ordertype": self.ordertype,
            "pair": self.pair,
            "type": self.type,
            "volume": self.volume,
        }
        for name in ("price", "price2", "leverage", "oflags", "starttm", "expiretm"):
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        if self.userref is not None:
            payload["userref"] = str(self.userref)
        if self.validate_only is not None:
            payload["validate"] = "true" if self.validate_only else "false"
        return payload
