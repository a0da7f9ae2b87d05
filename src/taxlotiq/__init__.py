"""
TaxlotIQ.

Tax-lot accounting engine: open cost-basis lots plus realized and unrealized P&L
under FIFO, LIFO and HIFO lot selection.
"""

__version__ = "0.1.0"

from taxlotiq.config import EngineConfig
from taxlotiq.exceptions import NotFoundError, PortfolioNotFoundError, TaxlotError, ValidationError

# Configure structlog once at import time (quiet by default).
from taxlotiq.logging import configure_structlog
from taxlotiq.models import AccountingMethod, Mark, Side, Trade
from taxlotiq.service import TaxLotService

configure_structlog()

__all__ = [
    "AccountingMethod",
    "EngineConfig",
    "Mark",
    "NotFoundError",
    "PortfolioNotFoundError",
    "Side",
    "TaxLotService",
    "TaxlotError",
    "Trade",
    "ValidationError",
    "__version__",
]
