"""Tax-lot matching, P&L calculation and portfolio state."""

from taxlotiq.portfolio._builder import build_open_lots
from taxlotiq.portfolio._lot_models import Lot, LotClosure, PositionResult, RealizedTradeResult
from taxlotiq.portfolio.ledger import IngestResult, TradeLedger, parse_trades
from taxlotiq.portfolio.pnl import PnLCalculator
from taxlotiq.portfolio.repository import InMemoryPortfolioRepository, PortfolioState
from taxlotiq.portfolio.selection import order_lots

__all__ = [
    "InMemoryPortfolioRepository",
    "IngestResult",
    "Lot",
    "LotClosure",
    "PnLCalculator",
    "PortfolioState",
    "PositionResult",
    "RealizedTradeResult",
    "TradeLedger",
    "build_open_lots",
    "order_lots",
    "parse_trades",
]
