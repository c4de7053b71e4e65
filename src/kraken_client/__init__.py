"""Signed REST client for the Kraken exchange API."""

from .async_rest import AsyncRestClient
from .auth import ApiCredentials, AuthSigner, NonceSource
from .errors import (
    BadBodyError,
    EncodingError,
    ExchangeError,
    HeaderError,
    KrakenError,
    MissingApiKeyError,
    MissingApiSecretError,
    RateLimitError,
    SignatureError,
    TransportError,
    UnexpectedStatusError,
)
from .models import OrderRequest
from .rest import RestClient

__all__ = [
    "ApiCredentials",
    "AsyncRestClient",
    "AuthSigner",
    "BadBodyError",
    "EncodingError",
    "ExchangeError",
    "HeaderError",
    "KrakenError",
    "MissingApiKeyError",
    "MissingApiSecretError",
    "NonceSource",
    "OrderRequest",
    "RateLimitError",
    "RestClient",
    "SignatureError",
    "TransportError",
    "UnexpectedStatusError",
]
