from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from mintable.config.settings import create_default_config
from mintable.tools.ledgerctl import main


@pytest.fixture
def config_path(workspace_tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    for name in ("MINTABLE_MINTER", "MINTABLE_LEDGER_PATH", "MINTABLE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    path = workspace_tmp_path / "config.yaml"
    create_default_config(path, minter="M")
    monkeypatch.setenv("MINTABLE_LEDGER_PATH", str(workspace_tmp_path / "ledger"))
    return str(path)


def test_init_mint_transfer_and_inspect(config_path: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", config_path, "init", "--name", "BTC"]) == 0
    assert main(["--config", config_path, "mint", "--caller", "M", "M", "1000"]) == 0
    assert main(["--config", config_path, "transfer", "--caller", "M", "A", "250"]) == 0
    capsys.readouterr()

    assert main(["--config", config_path, "balance", "A"]) == 0
    assert capsys.readouterr().out.strip() == "250"

    assert main(["--config", config_path, "info"]) == 0
    out = capsys.readouterr().out
    assert "name: BTC" in out
    assert "minter: M" in out
    assert "total_supply: 1000" in out


def test_rejected_call_exits_non_zero(config_path: str, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--config", config_path, "init"])
    capsys.readouterr()

    assert main(["--config", config_path, "burn", "--caller", "M", "5"]) == 1
    assert "InsufficientBalance" in capsys.readouterr().err


def test_delegated_transfer_flow(config_path: str, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--config", config_path, "init"])
    main(["--config", config_path, "mint", "--caller", "M", "O", "500"])
    main(["--config", config_path, "approve", "--caller", "O", "S", "500"])
    capsys.readouterr()

    assert main(["--config", config_path, "transfer-from", "--caller", "S", "O", "T", "500"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert [orjson.loads(line)["event_type"] for line in lines] == ["Transfer", "Approval"]

    assert main(["--config", config_path, "allowance", "O", "S"]) == 0
    assert capsys.readouterr().out.strip() == "0"


def test_events_tail(config_path: str, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--config", config_path, "init"])
    main(["--config", config_path, "approve", "--caller", "M", "S", "9"])
    capsys.readouterr()

    assert main(["--config", config_path, "events", "--tail", "1"]) == 0
    event = orjson.loads(capsys.readouterr().out.strip())
    assert event["event_type"] == "Approval"
    assert event["sequence_num"] == 2


def test_reads_before_init_fail(config_path: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", config_path, "info"]) == 1
    assert "ReplayError" in capsys.readouterr().err


def test_init_twice_fails(config_path: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", config_path, "init"]) == 0
    assert main(["--config", config_path, "init"]) == 1
    assert "already holds" in capsys.readouterr().err
