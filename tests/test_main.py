from __future__ import annotations

from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

from mintable.config.settings import Settings, StorageConfig, TokenConfig
from mintable.main import build_host
from mintable.monitoring import Metrics


def _settings(path: Path, minter: str = "M") -> Settings:
    return Settings(
        token=TokenConfig(name="BTC", minter=minter),
        storage=StorageConfig(ledger_path=str(path / "ledger"), logs_path=str(path / "logs")),
    )


def test_build_host_creates_then_reopens(workspace_tmp_path: Path) -> None:
    settings = _settings(workspace_tmp_path)

    host = build_host(settings)
    assert host.call("M", "mint", to="A", value=42).ok

    reopened = build_host(settings)
    assert reopened.token.name() == "BTC"
    assert reopened.token.balance_of("A") == 42
    assert reopened.bus.ledger.last_sequence() == 2


def test_build_host_requires_minter_for_new_ledger(workspace_tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="token.minter not set"):
        build_host(_settings(workspace_tmp_path, minter=""))


def test_build_host_wires_metrics(workspace_tmp_path: Path) -> None:
    registry = CollectorRegistry()
    host = build_host(_settings(workspace_tmp_path), Metrics(registry=registry))

    host.call("M", "mint", to="A", value=5)

    assert registry.get_sample_value("events_published_total", {"event_type": "Transfer"}) == 2.0
    assert registry.get_sample_value("token_total_supply") == 5.0
    assert registry.get_sample_value("last_event_sequence") == 2.0
