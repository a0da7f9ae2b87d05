"""Lot commands - view open cost-basis lots."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import Annotated

import typer
from rich.table import Table

from taxlotiq.cli.utils import CLI_PORTFOLIO_ID, build_service, console, echo_json, format_quantity

app = typer.Typer(help="Open lot commands.")


@app.command("open")
def lots_open(
    trades_file: Annotated[Path, typer.Argument(help="JSON file with trades.")],
    symbol: Annotated[
        str | None,
        typer.Option("--symbol", "-s", help="Filter by specific symbol."),
    ] = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List open lots (inventory consumed FIFO)."""
    service = build_service(trades_file)
    response = service.list_open_lots(CLI_PORTFOLIO_ID)
    if symbol:
        response = response.model_copy(
            update={"open_lots": [lot for lot in response.open_lots if lot.symbol == symbol]}
        )

    if output_json:
        echo_json(response)
        return

    if not response.open_lots:
        console.print("[yellow]No open lots found[/yellow]")
        return

    table = Table(title="Open Lots", show_header=True)
    table.add_column("Lot", style="cyan", no_wrap=True)
    table.add_column("Symbol", style="magenta")
    table.add_column("Qty Open", justify="right")
    table.add_column("Unit Cost", justify="right")
    table.add_column("Acquired", style="dim")

    for lot in response.open_lots:
        table.add_row(
            lot.lot_id,
            lot.symbol,
            format_quantity(lot.qty_open),
            f"{lot.unit_cost:,.4f}",
            lot.acquired_at.isoformat(),
        )

    console.print(table)
