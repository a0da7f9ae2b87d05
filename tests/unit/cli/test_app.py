from __future__ import annotations

from typer.testing import CliRunner

from taxlotiq.cli import app
from taxlotiq.config import get_config
from taxlotiq.models import AccountingMethod

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "taxlotiq v0.1.0" in result.stdout


def test_default_method_uses_env_var_when_no_flag(monkeypatch) -> None:
    monkeypatch.setenv("TAXLOT_DEFAULT_METHOD", "hifo")

    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert get_config().default_method == AccountingMethod.HIFO


def test_default_method_flag_overrides_env_var(monkeypatch) -> None:
    monkeypatch.setenv("TAXLOT_DEFAULT_METHOD", "hifo")

    result = runner.invoke(app, ["--default-method", "lifo", "version"])

    assert result.exit_code == 0
    assert get_config().default_method == AccountingMethod.LIFO


def test_invalid_default_method_exits_cleanly() -> None:
    result = runner.invoke(app, ["--default-method", "average", "version"])

    assert result.exit_code == 1
    assert "Invalid default method" in result.stdout


def test_base_currency_from_env(monkeypatch) -> None:
    monkeypatch.setenv("TAXLOT_BASE_CURRENCY", "eur")

    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert get_config().default_base_currency == "EUR"


def test_blank_base_currency_env_exits_cleanly(monkeypatch) -> None:
    monkeypatch.setenv("TAXLOT_BASE_CURRENCY", "  ")

    result = runner.invoke(app, ["version"])

    assert result.exit_code == 1
    assert "Invalid base currency" in result.stdout
