"""CLI entry point for the Kraken REST client."""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys
import tomllib
from pathlib import Path
from typing import Any, Sequence

import yaml

from kraken_client.auth import ApiCredentials
from kraken_client.constants import DEFAULT_TIMEOUT
from kraken_client.errors import KrakenError
from kraken_client.rest import RestClient
from utils.credentials import (
    DEFAULT_SERVICE_NAME,
    load_api_credentials,
    store_api_credentials,
)
from utils.logging_config import setup_logging

LOGGER = logging.getLogger("kraken_client.cli")

SUPPORTED_FORMATS = (".json", ".toml", ".yaml", ".yml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Kraken REST API client")
    parser.add_argument("--version", action="version", version="kraken-client 0.1.0")
    parser.add_argument("--config", help="Path to JSON/TOML/YAML config file.")
    parser.add_argument(
        "--api-key", help="API key (defaults to $KRAKEN_API_KEY or keychain)."
    )
    parser.add_argument(
        "--api-secret",
        help="Base64 API secret (defaults to $KRAKEN_API_SECRET or keychain).",
    )
    parser.add_argument("--base-url", help="Override the REST base URL.")
    parser.add_argument(
        "--service-name",
        default=DEFAULT_SERVICE_NAME,
        help=f"Keyring service name (default: {DEFAULT_SERVICE_NAME}).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    parser.add_argument(
        "--structured-logs",
        action="store_true",
        help="Emit one JSON object per log line.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    public_parser = subparsers.add_parser("public", help="Call a public endpoint.")
    public_parser.add_argument("endpoint", help="Endpoint name, e.g. Ticker.")
    public_parser.add_argument(
        "params", nargs="*", metavar="KEY=VALUE", help="Request parameters."
    )
    public_parser.set_defaults(handler=run_public)

    private_parser = subparsers.add_parser(
        "private", help="Call a private (signed) endpoint."
    )
    private_parser.add_argument("endpoint", help="Endpoint name, e.g. Balance.")
    private_parser.add_argument(
        "params", nargs="*", metavar="KEY=VALUE", help="Request parameters."
    )
    private_parser.set_defaults(handler=run_private)

    balance_parser = subparsers.add_parser("balance", help="Show account balances.")
    balance_parser.set_defaults(handler=run_balance)

    store_parser = subparsers.add_parser(
        "store-credentials", help="Store API credentials in the OS keychain."
    )
    store_parser.set_defaults(handler=run_store_credentials)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=args.log_level, structured=args.structured_logs)
    try:
        return args.handler(args)
    except KrakenError as exc:
        LOGGER.error("Request failed: %s", exc)
        return 1
    except (ValueError, RuntimeError, OSError) as exc:
        LOGGER.error("%s", exc)
        return 2


def run_public(args: argparse.Namespace) -> int:
    client = build_client(args, required=False)
    result = client.public(args.endpoint, parse_params(args.params))
    print_result(result)
    return 0


def run_private(args: argparse.Namespace) -> int:
    client = build_client(args, required=True)
    result = client.private(args.endpoint, parse_params(args.params))
    print_result(result)
    return 0


def run_balance(args: argparse.Namespace) -> int:
    client = build_client(args, required=True)
    print_result(client.balance())
    return 0


def run_store_credentials(args: argparse.Namespace) -> int:
    api_key = args.api_key or getpass.getpass("Enter Kraken API key: ")
    api_secret = args.api_secret or getpass.getpass("Enter Kraken API secret: ")
    store_api_credentials(args.service_name, api_key, api_secret)
    LOGGER.info("Stored credentials in keychain for service '%s'.", args.service_name)
    return 0


def build_client(args: argparse.Namespace, *, required: bool) -> RestClient:
    config = load_config(Path(args.config).expanduser()) if args.config else {}
    overrides = {
        key: value
        for key, value in (("api_key", args.api_key), ("api_secret", args.api_secret))
        if value
    }
    credentials: ApiCredentials = load_api_credentials(
        args.service_name, {**config, **overrides}, required=required
    )
    base_url = args.base_url or config.get("base_url")
    timeout = float(config.get("timeout", DEFAULT_TIMEOUT))
    return RestClient(base_url=base_url, credentials=credentials, timeout=timeout)


def parse_params(raw_params: Sequence[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for item in raw_params:
        key, separator, value = item.partition("=")
        if not separator or not key:
            raise ValueError(f"Invalid parameter '{item}'. Expected KEY=VALUE.")
        params[key] = value
    return params


def print_result(result: Any) -> None:
    if isinstance(result, bytes):
        sys.stdout.buffer.write(result)
        return
    print(json.dumps(result, indent=2, sort_keys=True))


def load_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}. Ensure the path is correct and readable."
        )
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        supported = ", ".join(SUPPORTED_FORMATS)
        raise ValueError(
            f"Unsupported config format '{suffix}'. Supported formats: {supported}."
        )
    text = config_path.read_text(encoding="utf-8")
    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix == ".toml":
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Invalid config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {config_path} must contain a JSON/TOML/YAML object mapping."
        )
    return data


if __name__ == "__main__":
    raise SystemExit(main())
