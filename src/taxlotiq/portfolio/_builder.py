"""Open-lot inventory built by replaying the full trade history.

The inventory baseline always consumes lots FIFO. The accounting method requested
by a P&L query only changes how these lots are ordered, not which are open.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from taxlotiq.models import AccountingMethod, Side
from taxlotiq.portfolio._lot_models import Lot
from taxlotiq.portfolio.selection import order_lots

if TYPE_CHECKING:
    from collections.abc import Iterable

    from taxlotiq.models import Trade

logger = structlog.get_logger()


def sort_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Stable sort by timestamp; trades at the same instant keep ingestion order."""
    return sorted(trades, key=lambda t: t.timestamp)


def build_open_lots(trades: Iterable[Trade]) -> list[Lot]:
    """
    Replay trades and return the lots that still hold units.

    BUY trades open a new lot. SELL trades consume same-symbol lots oldest first until
    the sell quantity is exhausted; quantity beyond the available lots is ignored.

    Args:
        trades: Full trade history of a portfolio (any order).

    Returns:
        Open lots in acquisition order, excluding lots at or below the zero tolerance.
    """
    lots: list[Lot] = []

    for trade in sort_trades(trades):
        if trade.side == Side.BUY:
            lots.append(Lot.from_trade(trade))
            continue

        remaining = trade.qty
        candidates = [lot for lot in lots if lot.symbol == trade.symbol]
        for lot in order_lots(AccountingMethod.FIFO, candidates):
            if remaining <= 0:
                break
            remaining -= lot.consume(remaining)

        if remaining > 0:
            logger.debug(
                "Sell exceeds open quantity; excess left unmatched",
                client_trade_id=trade.client_trade_id,
                symbol=trade.symbol,
                unmatched_qty=remaining,
            )

    return [lot for lot in lots if lot.is_open]
