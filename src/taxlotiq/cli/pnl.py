"""P&L commands - realized and unrealized profit and loss."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import Annotated

import typer
from rich.table import Table

from taxlotiq.cli.utils import (
    CLI_PORTFOLIO_ID,
    build_service,
    console,
    echo_json,
    exit_with_error,
    format_quantity,
    format_signed_amount,
)
from taxlotiq.exceptions import TaxlotError

app = typer.Typer(help="Realized and unrealized P&L commands.")


def parse_mark_options(marks: list[str] | None) -> dict[str, float]:
    """Parse repeated `SYMBOL=PRICE` options into a price map.

    Raises:
        typer.Exit: If an option is not of the form SYMBOL=PRICE.
    """
    prices: dict[str, float] = {}
    for raw in marks or []:
        symbol, sep, price = raw.partition("=")
        if not sep or not symbol.strip():
            raise exit_with_error(f"Invalid mark '{raw}'. Expected SYMBOL=PRICE.")
        try:
            prices[symbol.strip()] = float(price)
        except ValueError:
            raise exit_with_error(f"Invalid mark price in '{raw}'.") from None
    return prices


@app.command("realized")
def pnl_realized(
    trades_file: Annotated[Path, typer.Argument(help="JSON file with trades.")],
    start: Annotated[
        str,
        typer.Option("--from", help="Window start (ISO-8601, inclusive)."),
    ],
    end: Annotated[
        str,
        typer.Option("--to", help="Window end (ISO-8601, inclusive)."),
    ],
    method: Annotated[
        str | None,
        typer.Option("--method", "-m", help="Lot method: fifo, lifo, hifo or specid."),
    ] = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """View realized P&L per sell in a date window."""
    from taxlotiq.config import get_config

    service = build_service(trades_file)
    try:
        response = service.realized_pnl(
            CLI_PORTFOLIO_ID,
            start=start,
            end=end,
            method=method or get_config().default_method,
        )
    except TaxlotError as e:
        raise exit_with_error(str(e)) from None

    if output_json:
        echo_json(response)
        return

    if not response.realized:
        console.print("[yellow]No realized P&L in window[/yellow]")
        return

    table = Table(title=f"Realized P&L ({response.method.value}, {response.currency})")
    table.add_column("Sell", style="cyan", no_wrap=True)
    table.add_column("Symbol", style="magenta")
    table.add_column("Lots", justify="right")
    table.add_column("Proceeds", justify="right")
    table.add_column("Cost Basis", justify="right")
    table.add_column("Fees", justify="right")
    table.add_column("P&L", justify="right")

    for result in response.realized:
        sell_id = result.lots_closed[0].sell_client_trade_id if result.lots_closed else "-"
        table.add_row(
            sell_id,
            result.symbol,
            str(len(result.lots_closed)),
            f"{result.proceeds:,.2f}",
            f"{result.cost_basis:,.2f}",
            f"{result.fees:,.2f}",
            format_signed_amount(result.pnl),
        )

    console.print(table)
    console.print(f"\nTotal realized P&L: {format_signed_amount(response.total_pnl)}")


@app.command("unrealized")
def pnl_unrealized(
    trades_file: Annotated[Path, typer.Argument(help="JSON file with trades.")],
    marks: Annotated[
        list[str] | None,
        typer.Option("--mark", help="Mark price as SYMBOL=PRICE (repeatable)."),
    ] = None,
    method: Annotated[
        str | None,
        typer.Option("--method", "-m", help="Lot method: fifo, lifo, hifo or specid."),
    ] = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """View unrealized P&L of open positions at the given marks."""
    prices = parse_mark_options(marks)
    service = build_service(trades_file)
    try:
        response = service.unrealized_pnl(CLI_PORTFOLIO_ID, marks=prices, method=method)
    except TaxlotError as e:
        raise exit_with_error(str(e)) from None

    if output_json:
        echo_json(response)
        return

    if not response.positions:
        console.print("[yellow]No open positions found[/yellow]")
        return

    table = Table(title=f"Unrealized P&L ({response.method.value}, {response.currency})")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Qty", justify="right")
    table.add_column("WAC", justify="right")
    table.add_column("Mark", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Cost Basis", justify="right")
    table.add_column("Unrealized", justify="right")

    unknown = 0
    total = 0.0
    for pos in response.positions:
        if pos.unrealized is None:
            unknown += 1
        else:
            total += pos.unrealized
        table.add_row(
            pos.symbol,
            format_quantity(pos.qty),
            f"{pos.wac:,.4f}",
            f"{pos.mark:,.4f}" if pos.mark is not None else "-",
            f"{pos.value:,.2f}" if pos.value is not None else "-",
            f"{pos.cost_basis:,.2f}",
            format_signed_amount(pos.unrealized),
        )

    console.print(table)
    total_label = "Total unrealized P&L (known only)" if unknown else "Total unrealized P&L"
    console.print(f"\n{total_label}: {format_signed_amount(total)}")
    if unknown:
        console.print(f"[yellow]{unknown} position(s) have no mark price.[/yellow]")
