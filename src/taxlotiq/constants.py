"""Centralized policy constants for the tax-lot engine.

Named constants for the accounting literals shared by the lot builder, the
realized P&L engine and the position valuator.
"""

from __future__ import annotations

from datetime import timedelta

# =============================================================================
# Lot bookkeeping
# =============================================================================

# A lot whose remaining quantity is at or below this value is considered closed.
#
# Used by:
# - portfolio/_lot_models.py: Lot.is_open
# - portfolio/_builder.py: open-lot filtering after replay
ZERO_QTY_TOLERANCE: float = 1e-12

# =============================================================================
# Holding periods
# =============================================================================

MS_PER_DAY: int = 24 * 60 * 60 * 1000

# Holding period at or beyond which a closure is flagged long-term.
# A flat 365 days; leap years are not taken into account.
LONG_TERM_HOLDING_DAYS: int = 365

LONG_TERM_HOLDING_MS: int = LONG_TERM_HOLDING_DAYS * MS_PER_DAY

# Timestamps are kept at millisecond resolution.
TIMESTAMP_RESOLUTION: timedelta = timedelta(milliseconds=1)

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_BASE_CURRENCY: str = "USD"
