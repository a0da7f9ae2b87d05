"""Lot and P&L result data models.

These dataclasses are shared by the lot builder, the realized P&L engine and the
position valuator:
- Open cost-basis lots (Lot)
- Per-lot realized closures (LotClosure)
- Per-sell realized results (RealizedTradeResult)
- Per-symbol mark-to-market results (PositionResult)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003 - Required at runtime for pydantic schemas
from typing import TYPE_CHECKING

from taxlotiq.constants import ZERO_QTY_TOLERANCE

if TYPE_CHECKING:
    from taxlotiq.models import Trade


@dataclass
class Lot:
    """Units acquired by a single BUY trade at a specific cost basis.

    `qty_open` only ever decreases as sells consume the lot.
    """

    lot_id: str
    symbol: str
    qty_open: float
    unit_cost: float
    acquired_at: datetime

    @classmethod
    def from_trade(cls, trade: Trade) -> Lot:
        """Open a lot from a BUY trade, folding the fee into the per-unit cost."""
        return cls(
            lot_id=trade.client_trade_id,
            symbol=trade.symbol,
            qty_open=trade.qty,
            unit_cost=trade.price + trade.fee_amount / trade.qty,
            acquired_at=trade.timestamp,
        )

    @property
    def is_open(self) -> bool:
        """True while the remaining quantity is above the zero tolerance."""
        return self.qty_open > ZERO_QTY_TOLERANCE

    def consume(self, qty: float) -> float:
        """Consume up to `qty` units and return how many were taken."""
        take = min(self.qty_open, qty)
        self.qty_open -= take
        return take


@dataclass(frozen=True)
class LotClosure:
    """Quantity of one lot closed by one sell."""

    buy_client_trade_id: str
    sell_client_trade_id: str
    qty: float
    buy_price: float
    sell_price: float
    holding_period_days: int
    long_term: bool


@dataclass
class RealizedTradeResult:
    """Realized P&L of a single SELL trade across the lots it closed.

    `fees` is the sell's own fee; it is reported, not netted into `pnl`.
    """

    symbol: str
    proceeds: float
    cost_basis: float
    fees: float
    pnl: float
    lots_closed: list[LotClosure] = field(default_factory=list)


@dataclass
class PositionResult:
    """Mark-to-market view of the open lots of one symbol.

    Mark-dependent fields are None when no mark was supplied for the symbol.
    """

    symbol: str
    qty: float
    wac: float
    mark: float | None
    value: float | None
    cost_basis: float
    unrealized: float | None
    lots: list[Lot] = field(default_factory=list)
