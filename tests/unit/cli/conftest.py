from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.unit.cli.fixtures import SCENARIO_TRADES, write_trades_file

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def trades_file(tmp_path: Path) -> Path:
    """Scenario trades written as a bare JSON list."""
    return write_trades_file(tmp_path / "trades.json", SCENARIO_TRADES)


@pytest.fixture
def buys_file(tmp_path: Path) -> Path:
    """Only the scenario buys, wrapped in a `trades` object."""
    return write_trades_file(tmp_path / "buys.json", {"trades": SCENARIO_TRADES[:2]})


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TAXLOT_DEFAULT_METHOD", raising=False)
    monkeypatch.delenv("TAXLOT_BASE_CURRENCY", raising=False)
