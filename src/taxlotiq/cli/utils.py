"""Shared utilities for CLI commands (console output, trade files, service setup)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import typer
from pydantic import BaseModel
from rich.console import Console

from taxlotiq.exceptions import TaxlotError

if TYPE_CHECKING:
    from pathlib import Path

    from taxlotiq.service import TaxLotService

console = Console()

CLI_PORTFOLIO_ID = "cli"


def exit_with_error(message: str) -> typer.Exit:
    """Print a red error line and return the Exit to raise."""
    console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(1)


def load_trades_file(path: Path) -> list[Any]:
    """Load a JSON trades file.

    The file holds either a list of trade objects or an object with a `trades` list.

    Raises:
        typer.Exit: If the file is missing, not valid JSON, or has an unexpected shape.
    """
    if not path.exists():
        raise exit_with_error(f"Trades file not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError:
        raise exit_with_error(f"Trades file is not valid JSON: {path}") from None

    if isinstance(raw, dict):
        raw = raw.get("trades")
    if not isinstance(raw, list):
        raise exit_with_error(
            f"Trades file has an unexpected schema: {path} "
            "(expected a list or an object with 'trades: [...]')"
        )
    return raw


def build_service(trades_file: Path, base_currency: str | None = None) -> TaxLotService:
    """Create an in-memory service with the file's trades ingested into one portfolio.

    Raises:
        typer.Exit: If the file cannot be loaded or any trade is invalid.
    """
    from taxlotiq.service import TaxLotService

    trades = load_trades_file(trades_file)
    service = TaxLotService()
    try:
        service.register_portfolio(CLI_PORTFOLIO_ID, base_currency)
        service.ingest_trades(CLI_PORTFOLIO_ID, trades)
    except TaxlotError as e:
        raise exit_with_error(str(e)) from None
    return service


def echo_json(model: BaseModel) -> None:
    """Write a response model as indented JSON to stdout."""
    typer.echo(json.dumps(model.model_dump(mode="json"), indent=2, default=str))


def format_signed_amount(value: float | None) -> str:
    """Format an amount with sign and color; None renders as '-'."""
    if value is None:
        return "-"
    text = f"{value:,.2f}"
    if value > 0:
        return f"[green]+{text}[/green]"
    if value < 0:
        return f"[red]{text}[/red]"
    return text


def format_quantity(value: float) -> str:
    """Format a quantity without trailing zeros."""
    return f"{value:,.8f}".rstrip("0").rstrip(".")
