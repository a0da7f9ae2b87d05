"""In-memory portfolio repository with per-portfolio write serialization."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, TypeVar

import structlog

from taxlotiq.exceptions import PortfolioNotFoundError
from taxlotiq.portfolio.ledger import TradeLedger

if TYPE_CHECKING:
    from collections.abc import Callable

    from taxlotiq.portfolio._lot_models import Lot

logger = structlog.get_logger()

R = TypeVar("R")


@dataclass(frozen=True)
class PortfolioState:
    """Snapshot of a portfolio: its trade ledger and the open lots derived from it.

    Snapshots are replaced, never edited, so a reader holding one always sees a
    ledger and lot set that belong together.
    """

    portfolio_id: str
    base_currency: str
    ledger: TradeLedger = field(default_factory=TradeLedger)
    open_lots: tuple[Lot, ...] = ()

    def with_base_currency(self, base_currency: str) -> PortfolioState:
        """Return a copy with a new base currency."""
        return replace(self, base_currency=base_currency)


class InMemoryPortfolioRepository:
    """
    Portfolio snapshots keyed by portfolio id.

    Writes to the same portfolio run one at a time under that portfolio's lock;
    different portfolios never contend. Reads take no lock: they get whichever
    snapshot was last saved.
    """

    def __init__(self) -> None:
        self._states: dict[str, PortfolioState] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, portfolio_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(portfolio_id)
            if lock is None:
                lock = self._locks[portfolio_id] = threading.Lock()
            return lock

    def exists(self, portfolio_id: str) -> bool:
        """Return True if the portfolio has been saved."""
        return portfolio_id in self._states

    def load(self, portfolio_id: str) -> PortfolioState:
        """Get the current snapshot.

        Raises:
            PortfolioNotFoundError: If the portfolio is not registered.
        """
        state = self._states.get(portfolio_id)
        if state is None:
            raise PortfolioNotFoundError(portfolio_id)
        return state

    def save(self, state: PortfolioState) -> None:
        """Store a snapshot, replacing any previous one for the same id."""
        with self._lock_for(state.portfolio_id):
            self._states[state.portfolio_id] = state

    def mutate(
        self,
        portfolio_id: str,
        fn: Callable[[PortfolioState | None], tuple[PortfolioState, R]],
    ) -> R:
        """
        Atomically replace a portfolio snapshot.

        `fn` receives the current snapshot (None if the portfolio does not exist yet)
        and returns the new snapshot plus a result to hand back to the caller. If `fn`
        raises, the stored snapshot is left untouched.

        Args:
            portfolio_id: Portfolio to update.
            fn: Pure transformation of the snapshot.

        Returns:
            The result returned by `fn`.
        """
        with self._lock_for(portfolio_id):
            new_state, result = fn(self._states.get(portfolio_id))
            self._states[portfolio_id] = new_state
        logger.debug(
            "Saved portfolio snapshot",
            portfolio_id=portfolio_id,
            trades=len(new_state.ledger),
            open_lots=len(new_state.open_lots),
        )
        return result
