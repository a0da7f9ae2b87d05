"""
CLI application for the tax-lot engine.

Each command loads a JSON trades file into an in-memory portfolio and runs one query.
"""

from __future__ import annotations

from typing import Annotated

import typer
from dotenv import find_dotenv, load_dotenv

from taxlotiq.cli.lots import app as lots_app
from taxlotiq.cli.pnl import app as pnl_app
from taxlotiq.cli.trades import app as trades_app
from taxlotiq.cli.utils import console

app = typer.Typer(
    name="taxlot",
    help="TaxlotIQ CLI - cost-basis lots and realized/unrealized P&L.",
    add_completion=False,
)

app.add_typer(trades_app, name="trades")
app.add_typer(lots_app, name="lots")
app.add_typer(pnl_app, name="pnl")


@app.callback()
def main(
    method: Annotated[
        str | None,
        typer.Option(
            "--default-method",
            help="Default lot method. Defaults to TAXLOT_DEFAULT_METHOD or FIFO.",
            show_default=False,
        ),
    ] = None,
) -> None:
    """TaxlotIQ CLI."""
    from pydantic import ValidationError as PydanticValidationError

    from taxlotiq.config import EngineConfig, set_config

    load_dotenv(find_dotenv(usecwd=True))

    # Priority: CLI flag > TAXLOT_DEFAULT_METHOD env var > FIFO
    try:
        config = EngineConfig.from_env()
        if method is not None:
            config = EngineConfig(
                default_method=method, default_base_currency=config.default_base_currency
            )
    except PydanticValidationError as e:
        fields = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
        if "default_method" in fields:
            console.print(
                "[red]Error:[/red] Invalid default method. "
                "Expected one of: fifo, lifo, hifo, specid."
            )
        else:
            console.print("[red]Error:[/red] Invalid base currency (TAXLOT_BASE_CURRENCY).")
        raise typer.Exit(1) from None
    set_config(config)


@app.command()
def version() -> None:
    """Show version information."""
    from taxlotiq import __version__

    console.print(f"taxlotiq v{__version__}")


__all__ = ["app"]
