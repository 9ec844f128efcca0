from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from mintable.config.settings import Settings, TokenConfig, create_default_config, load_settings


def test_defaults_without_config_file(workspace_tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("MINTABLE_MINTER", "MINTABLE_LEDGER_PATH", "MINTABLE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings(workspace_tmp_path / "missing.yaml")

    assert settings.token.name == "Mintable"
    assert settings.token.balance_bits == 128
    assert settings.storage.ledger_path == "./data/ledger"
    assert settings.validate_for_init() == ["token.minter not set"]


def test_default_config_round_trips(workspace_tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MINTABLE_MINTER", raising=False)
    path = workspace_tmp_path / "config.yaml"
    create_default_config(path, minter="alice")

    settings = load_settings(path)

    assert settings.token.minter == "alice"
    assert settings.monitoring.api_port == 8000
    assert settings.validate_for_init() == []


def test_env_overrides_config_file(workspace_tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = workspace_tmp_path / "config.yaml"
    create_default_config(path, minter="alice")
    monkeypatch.setenv("MINTABLE_MINTER", "bob")
    monkeypatch.setenv("MINTABLE_LEDGER_PATH", str(workspace_tmp_path / "ledger"))
    monkeypatch.setenv("MINTABLE_LOG_LEVEL", "DEBUG")

    settings = load_settings(path)

    assert settings.token.minter == "bob"
    assert settings.storage.ledger_path == str(workspace_tmp_path / "ledger")
    assert settings.monitoring.log_level == "DEBUG"


def test_token_config_validation() -> None:
    with pytest.raises(ValidationError):
        TokenConfig(name="   ")
    with pytest.raises(ValidationError):
        TokenConfig(balance_bits=512)
    assert Settings().token.balance_bits == 128
