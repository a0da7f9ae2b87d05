"""Trade commands - validate and ingest a trades file."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import Annotated

import typer
from rich.table import Table

from taxlotiq.cli.utils import (
    CLI_PORTFOLIO_ID,
    console,
    echo_json,
    exit_with_error,
    load_trades_file,
)
from taxlotiq.exceptions import TaxlotError

app = typer.Typer(help="Trade ledger commands.")


@app.command("ingest")
def trades_ingest(
    trades_file: Annotated[Path, typer.Argument(help="JSON file with trades.")],
    base_currency: Annotated[
        str | None,
        typer.Option("--base", "-b", help="Portfolio base currency (default from config)."),
    ] = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Ingest a trades file and report accepted and duplicate trades."""
    from taxlotiq.service import TaxLotService

    trades = load_trades_file(trades_file)
    service = TaxLotService()
    try:
        service.register_portfolio(CLI_PORTFOLIO_ID, base_currency)
        response = service.ingest_trades(CLI_PORTFOLIO_ID, trades)
    except TaxlotError as e:
        raise exit_with_error(str(e)) from None

    if output_json:
        echo_json(response)
        return

    table = Table(title="Trade Ingest", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Accepted:", str(len(response.accepted)))
    table.add_row("Duplicates:", str(len(response.duplicates)))
    table.add_row("Total trades:", str(response.total_trades))
    table.add_row("Open lots:", str(response.open_lots))
    console.print(table)

    if response.duplicates:
        console.print(
            f"[yellow]Skipped duplicate ids:[/yellow] {', '.join(response.duplicates)}"
        )
