from __future__ import annotations

import json

from typer.testing import CliRunner

from taxlotiq.cli import app
from tests.unit.cli.fixtures import SCENARIO_TRADES, write_trades_file

runner = CliRunner()


def test_trades_ingest_table(trades_file) -> None:
    result = runner.invoke(app, ["trades", "ingest", str(trades_file)])

    assert result.exit_code == 0
    assert "Trade Ingest" in result.stdout
    assert "Open lots:" in result.stdout
    assert "Skipped duplicate ids" not in result.stdout


def test_trades_ingest_reports_duplicates(tmp_path) -> None:
    path = write_trades_file(tmp_path / "dupes.json", [SCENARIO_TRADES[0], SCENARIO_TRADES[0]])

    result = runner.invoke(app, ["trades", "ingest", str(path)])

    assert result.exit_code == 0
    assert "Skipped duplicate ids: b1" in result.stdout


def test_trades_ingest_json(trades_file) -> None:
    result = runner.invoke(app, ["trades", "ingest", str(trades_file), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["accepted"] == ["b1", "b2", "s1"]
    assert payload["duplicates"] == []
    assert payload["total_trades"] == 3
    assert payload["open_lots"] == 1


def test_trades_ingest_missing_file(tmp_path) -> None:
    result = runner.invoke(app, ["trades", "ingest", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "Trades file not found" in result.stdout


def test_trades_ingest_invalid_json(tmp_path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["trades", "ingest", str(path)])

    assert result.exit_code == 1
    assert "not valid JSON" in result.stdout


def test_trades_ingest_unexpected_schema(tmp_path) -> None:
    path = write_trades_file(tmp_path / "schema.json", {"rows": []})

    result = runner.invoke(app, ["trades", "ingest", str(path)])

    assert result.exit_code == 1
    assert "unexpected schema" in result.stdout


def test_trades_ingest_invalid_trade(tmp_path) -> None:
    path = write_trades_file(tmp_path / "invalid.json", [{**SCENARIO_TRADES[0], "qty": 0}])

    result = runner.invoke(app, ["trades", "ingest", str(path)])

    assert result.exit_code == 1
    assert "Invalid trade payload" in result.stdout
