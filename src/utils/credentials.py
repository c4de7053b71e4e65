"""Credential loading helpers for the Kraken client.

Each credential is resolved independently from, in order: the config
mapping (plain values or ``${ENV_VAR}`` placeholders), the environment, and
the OS keychain.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re
from typing import Callable, Mapping

import keyring
from keyring.errors import KeyringError

from kraken_client.auth import ApiCredentials

DEFAULT_SERVICE_NAME = "kraken-client"
DEFAULT_API_KEY_ENV = "KRAKEN_API_KEY"
DEFAULT_API_SECRET_ENV = "KRAKEN_API_SECRET"
DEFAULT_API_KEY_USERNAME = "api_key"
DEFAULT_API_SECRET_USERNAME = "api_secret"
_ENV_PATTERN = re.compile(r"^\$\{([A-Z0-9_]+)\}$")

LOGGER = logging.getLogger("kraken_client.credentials")


def load_api_credentials(
    service_name: str,
    config: Mapping[str, object] | None = None,
    *,
    required: bool = True,
    api_key_env: str = DEFAULT_API_KEY_ENV,
    api_secret_env: str = DEFAULT_API_SECRET_ENV,
    api_key_username: str = DEFAULT_API_KEY_USERNAME,
    api_secret_username: str = DEFAULT_API_SECRET_USERNAME,
) -> ApiCredentials:
    """Load API credentials from config, env vars, or keyring in order.

    With ``required=False`` whatever was found is returned, so public-only
    callers can run without a key and private calls fail later with
    ``MissingApiKeyError``/``MissingApiSecretError``.
    """
    api_key = _resolve(
        "api_key",
        [
            ("config", lambda: _config_value(config, "api_key")),
            ("environment", lambda: _clean_value(os.getenv(api_key_env))),
            ("keychain", lambda: _keyring_value(service_name, api_key_username)),
        ],
    )
    api_secret = _resolve(
        "api_secret",
        [
            ("config", lambda: _config_value(config, "api_secret")),
            ("environment", lambda: _clean_value(os.getenv(api_secret_env))),
            ("keychain", lambda: _keyring_value(service_name, api_secret_username)),
        ],
    )

    if required and (not api_key or not api_secret):
        raise ValueError(
            "API credentials are missing. Provide api_key/api_secret in the config, "
            f"set {api_key_env}/{api_secret_env}, or store them in the keychain "
            f"for service '{service_name}'."
        )
    if api_secret and not is_base64_secret(api_secret):
        if required:
            raise ValueError(
                "API secret is not valid base64. Copy the private key exactly as "
                "shown when the API key was created."
            )
        # private calls will fail with SignatureError if it is ever used
        LOGGER.warning("API secret is not valid base64; private calls will fail.")

    return ApiCredentials(api_key=api_key, api_secret=api_secret)


def store_api_credentials(
    service_name: str,
    api_key: str,
    api_secret: str,
    *,
    api_key_username: str = DEFAULT_API_KEY_USERNAME,
    api_secret_username: str = DEFAULT_API_SECRET_USERNAME,
) -> None:
    """Store API credentials in the OS keychain via keyring."""
    api_key_value = _clean_value(api_key)
    api_secret_value = _clean_value(api_secret)
    if not api_key_value or not api_secret_value:
        raise ValueError("api_key and api_secret must be non-empty strings.")
    if not is_base64_secret(api_secret_value):
        raise ValueError("API secret is not valid base64; refusing to store it.")
    try:
        keyring.set_password(service_name, api_key_username, api_key_value)
        keyring.set_password(service_name, api_secret_username, api_secret_value)
    except KeyringError as exc:
        raise RuntimeError(
            "Failed to store credentials in the OS keychain. "
            "Ensure a keyring backend is available."
        ) from exc


def is_base64_secret(value: str) -> bool:
    try:
        return bool(base64.b64decode(value, validate=True))
    except (binascii.Error, ValueError):
        return False


def _resolve(
    name: str, sources: list[tuple[str, Callable[[], str | None]]]
) -> str | None:
    for source_name, lookup in sources:
        value = lookup()
        if value:
            LOGGER.debug("Loaded %s from %s", name, source_name)
            return value
    return None


def _config_value(config: Mapping[str, object] | None, key: str) -> str | None:
    if not config or config.get(key) is None:
        return None
    raw = str(config[key]).strip()
    match = _ENV_PATTERN.match(raw)
    if match:
        return _clean_value(os.getenv(match.group(1)))
    return _clean_value(raw)


def _clean_value(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def _keyring_value(service_name: str, username: str) -> str | None:
    try:
        return _clean_value(keyring.get_password(service_name, username))
    except KeyringError as exc:
        raise RuntimeError(
            "Failed to access the OS keychain. "
            "Ensure a keyring backend is available."
        ) from exc
