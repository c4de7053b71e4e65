"""Tests for the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

import cli.main as cli_main
import utils.credentials as credentials
from kraken_client.errors import ExchangeError

SECRET = "kQH5HW/8p1uGOVjbgWA7FunAmGO8lsSUXNsu3eow76sz84Q18fWxnyRzBHCd3pd5nE9qa99HAZtuZuj6F1huXg=="


class StubClient:
    instances: list["StubClient"] = []

    def __init__(self, base_url=None, credentials=None, timeout=10.0) -> None:
        self.base_url = base_url
        self.credentials = credentials
        self.timeout = timeout
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        StubClient.instances.append(self)

    def public(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        self.calls.append(("public", endpoint, dict(params or {})))
        return {"XXBTZUSD": {"c": ["37500.0", "1"]}}

    def private(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        self.calls.append(("private", endpoint, dict(params or {})))
        raise ExchangeError(["EGeneral:Permission denied"])

    def balance(self) -> Any:
        self.calls.append(("private", "Balance", {}))
        return {"ZUSD": "1000.0"}


@pytest.fixture(autouse=True)
def _isolate(monkeypatch):
    StubClient.instances = []
    monkeypatch.setattr(cli_main, "RestClient", StubClient)
    monkeypatch.setattr(cli_main, "setup_logging", lambda **kwargs: None)
    monkeypatch.delenv(credentials.DEFAULT_API_KEY_ENV, raising=False)
    monkeypatch.delenv(credentials.DEFAULT_API_SECRET_ENV, raising=False)
    monkeypatch.setattr(
        credentials.keyring, "get_password", lambda service, username: None
    )


def test_public_command_prints_result(capsys) -> None:
    exit_code = cli_main.main(["public", "Ticker", "pair=XBTUSD"])

    assert exit_code == 0
    assert StubClient.instances[0].calls == [("public", "Ticker", {"pair": "XBTUSD"})]
    assert json.loads(capsys.readouterr().out) == {
        "XXBTZUSD": {"c": ["37500.0", "1"]}
    }


def test_balance_uses_flag_credentials(capsys) -> None:
    exit_code = cli_main.main(["--api-key", "key", "--api-secret", SECRET, "balance"])

    assert exit_code == 0
    client = StubClient.instances[0]
    assert client.credentials.api_key == "key"
    assert client.credentials.api_secret == SECRET
    assert json.loads(capsys.readouterr().out) == {"ZUSD": "1000.0"}


def test_private_command_reports_exchange_error() -> None:
    exit_code = cli_main.main(
        ["--api-key", "key", "--api-secret", SECRET, "private", "Ledgers", "asset=XBT"]
    )

    assert exit_code == 1
    assert StubClient.instances[0].calls == [("private", "Ledgers", {"asset": "XBT"})]


def test_private_command_without_credentials_is_config_error() -> None:
    exit_code = cli_main.main(["balance"])

    assert exit_code == 2
    assert StubClient.instances == []


def test_config_file_supplies_credentials_and_base_url(tmp_path: Path) -> None:
    config_path = tmp_path / "kraken.yaml"
    config_path.write_text(
        f"api_key: file-key\napi_secret: \"{SECRET}\"\nbase_url: http://localhost:9000\ntimeout: 5\n",
        encoding="utf-8",
    )

    exit_code = cli_main.main(["--config", str(config_path), "balance"])

    assert exit_code == 0
    client = StubClient.instances[0]
    assert client.base_url == "http://localhost:9000"
    assert client.timeout == 5.0
    assert client.credentials.api_key == "file-key"


def test_invalid_param_is_usage_error() -> None:
    assert cli_main.main(["public", "Ticker", "pairXBTUSD"]) == 2


def test_load_config_rejects_unknown_suffix(tmp_path: Path) -> None:
    config_path = tmp_path / "kraken.ini"
    config_path.write_text("[kraken]", encoding="utf-8")

    with pytest.raises(ValueError):
        cli_main.load_config(config_path)


def test_load_config_reads_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "kraken.toml"
    config_path.write_text('api_key = "toml-key"\n', encoding="utf-8")

    assert cli_main.load_config(config_path) == {"api_key": "toml-key"}


def test_store_credentials_command(monkeypatch) -> None:
    stored: list[tuple[str, str, str]] = []
    monkeypatch.setattr(
        cli_main,
        "store_api_credentials",
        lambda service, key, secret: stored.append((service, key, secret)),
    )

    exit_code = cli_main.main(
        ["--api-key", "key", "--api-secret", SECRET, "store-credentials"]
    )

    assert exit_code == 0
    assert stored == [(credentials.DEFAULT_SERVICE_NAME, "key", SECRET)]
