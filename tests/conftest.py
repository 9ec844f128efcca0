from __future__ import annotations

import re
import shutil
from pathlib import Path
from uuid import uuid4

import pytest
import structlog

from mintable.ledger import EventBus, EventLedger, MintableToken

MINTER = "minter"


def _safe_node_name(name: str) -> str:
    # Windows-safe-ish: keep alnum, dash, underscore, dot.
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return name or "test"


@pytest.fixture
def workspace_tmp_path(request: pytest.FixtureRequest) -> Path:
    """Temp dir rooted in the workspace (not system temp)."""
    root = Path.cwd() / ".pytest_tmp_workspace" / _safe_node_name(request.node.name) / uuid4().hex
    root.mkdir(parents=True, exist_ok=True)
    try:
        yield root
    finally:
        shutil.rmtree(root, ignore_errors=True)


@pytest.fixture(autouse=True)
def _reset_structlog() -> None:
    """Undo logging configuration done by CLI or runtime entry points."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def token() -> MintableToken:
    """Fresh ledger named BTC created by MINTER, with the genesis event drained."""
    ledger = MintableToken("BTC", MINTER)
    ledger.drain_events()
    return ledger


@pytest.fixture
def bus(workspace_tmp_path: Path) -> EventBus:
    return EventBus(EventLedger(workspace_tmp_path / "ledger"))
