"""P&L (Profit and Loss) calculator for tax lots.

Realized P&L replays the trade history on every call with its own lot list, so the
requested accounting method decides which lots each sell closes. Unrealized P&L
revalues the inventory lots produced by the lot builder (always FIFO-consumed) and
uses the method only to order them.

Note on windowing:
    A realized result is reported when any of its closures belongs to a sell inside
    [start, end], and it is reported whole. Every result comes from a single sell,
    so in practice a sell inside the window is reported with all of its closures.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import structlog

from taxlotiq.constants import LONG_TERM_HOLDING_MS, MS_PER_DAY
from taxlotiq.models import AccountingMethod, Side, to_epoch_ms
from taxlotiq.portfolio._builder import sort_trades
from taxlotiq.portfolio._lot_models import Lot, LotClosure, PositionResult, RealizedTradeResult
from taxlotiq.portfolio.selection import order_lots

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from taxlotiq.models import Trade

logger = structlog.get_logger()


def holding_period_days(acquired_ms: int, sold_ms: int) -> int:
    """Whole days between acquisition and sale, rounding halves up."""
    return math.floor((sold_ms - acquired_ms) / MS_PER_DAY + 0.5)


def is_long_term(acquired_ms: int, sold_ms: int) -> bool:
    """True when the lot was held for at least 365 days (flat, not calendar-aware)."""
    return sold_ms - acquired_ms >= LONG_TERM_HOLDING_MS


class PnLCalculator:
    """Calculate realized and unrealized P&L for a portfolio's trades and lots."""

    def _close_lots(
        self,
        sell: Trade,
        lots: list[Lot],
        method: AccountingMethod,
    ) -> RealizedTradeResult:
        """Consume lots for one sell in `method` order and accumulate the result."""
        sold_ms = to_epoch_ms(sell.timestamp)
        remaining = sell.qty
        proceeds = 0.0
        cost = 0.0
        pnl = 0.0
        closed: list[LotClosure] = []

        candidates = [lot for lot in lots if lot.symbol == sell.symbol and lot.qty_open > 0]
        for lot in order_lots(method, candidates):
            if remaining <= 0:
                break
            take = lot.consume(remaining)
            remaining -= take

            proceeds += take * sell.price
            cost += take * lot.unit_cost
            pnl += take * (sell.price - lot.unit_cost)

            acquired_ms = to_epoch_ms(lot.acquired_at)
            closed.append(
                LotClosure(
                    buy_client_trade_id=lot.lot_id,
                    sell_client_trade_id=sell.client_trade_id,
                    qty=take,
                    buy_price=lot.unit_cost,
                    sell_price=sell.price,
                    holding_period_days=holding_period_days(acquired_ms, sold_ms),
                    long_term=is_long_term(acquired_ms, sold_ms),
                )
            )

        if remaining > 0:
            logger.debug(
                "Sell exceeds open quantity; realized on matched portion only",
                client_trade_id=sell.client_trade_id,
                symbol=sell.symbol,
                unmatched_qty=remaining,
            )

        return RealizedTradeResult(
            symbol=sell.symbol,
            proceeds=proceeds,
            cost_basis=cost,
            fees=sell.fee_amount,
            pnl=pnl,
            lots_closed=closed,
        )

    def calculate_realized(
        self,
        trades: Iterable[Trade],
        start: datetime,
        end: datetime,
        method: AccountingMethod,
    ) -> list[RealizedTradeResult]:
        """
        Calculate per-sell realized P&L for sells executed within [start, end].

        All trades up to `end` are replayed, including buys before `start`, since they
        remain cost-basis sources for sells inside the window.

        Args:
            trades: Trade history of the portfolio (any order).
            start: Inclusive window start.
            end: Inclusive window end; later trades are ignored entirely.
            method: Lot selection method applied at each sell.

        Returns:
            One result per in-window sell that matched at least some open quantity,
            in execution order.
        """
        method = AccountingMethod(method)
        start_ms = to_epoch_ms(start)
        end_ms = to_epoch_ms(end)

        history = sort_trades(t for t in trades if to_epoch_ms(t.timestamp) <= end_ms)
        sell_times = {
            t.client_trade_id: to_epoch_ms(t.timestamp) for t in history if t.side == Side.SELL
        }

        lots: list[Lot] = []
        realized: list[RealizedTradeResult] = []

        for trade in history:
            if trade.side == Side.BUY:
                lots.append(Lot.from_trade(trade))
                continue

            result = self._close_lots(trade, lots, method)
            if result.pnl != 0 or result.proceeds != 0 or result.cost_basis != 0:
                realized.append(result)

        in_window = [
            result
            for result in realized
            if any(
                start_ms <= sell_times.get(closure.sell_client_trade_id, 0) <= end_ms
                for closure in result.lots_closed
            )
        ]
        logger.debug(
            "Calculated realized P&L",
            method=method.value,
            trades=len(history),
            results=len(realized),
            in_window=len(in_window),
        )
        return in_window

    def calculate_unrealized(
        self,
        open_lots: Iterable[Lot],
        method: AccountingMethod,
        marks: Mapping[str, float],
    ) -> list[PositionResult]:
        """
        Calculate mark-to-market P&L per symbol for the given open lots.

        Unrealized P&L is:

            qty * mark - sum(qty_open * unit_cost)

        Symbols without a mark (or with a zero mark) still report quantity, cost basis
        and weighted average cost; `mark`, `value` and `unrealized` are None.

        Args:
            open_lots: Inventory lots (from the lot builder).
            method: Method used to order lots within each position.
            marks: Mark price per symbol.

        Returns:
            One position per symbol, in order of first appearance after method ordering.
        """
        method = AccountingMethod(method)
        by_symbol: dict[str, list[Lot]] = {}
        for lot in order_lots(method, open_lots):
            by_symbol.setdefault(lot.symbol, []).append(lot)

        positions: list[PositionResult] = []
        for symbol, lots in by_symbol.items():
            qty = sum(lot.qty_open for lot in lots)
            cost = sum(lot.qty_open * lot.unit_cost for lot in lots)
            mark = marks.get(symbol) or None
            value = qty * mark if mark is not None else None
            unrealized = value - cost if value is not None else None

            positions.append(
                PositionResult(
                    symbol=symbol,
                    qty=qty,
                    wac=cost / qty if qty else 0.0,
                    mark=mark,
                    value=value,
                    cost_basis=cost,
                    unrealized=unrealized,
                    lots=lots,
                )
            )

        return positions
