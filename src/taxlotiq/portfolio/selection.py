"""Lot selection policy: the order in which a sale consumes open lots.

Each accounting method maps to a pure ordering function. Python's sort is
stable, so lots with equal keys keep their input order under every method
(including the descending ones, which use `reverse=True`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from taxlotiq.models import AccountingMethod

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from taxlotiq.portfolio._lot_models import Lot

logger = structlog.get_logger()


def _first_in_first_out(lots: list[Lot]) -> list[Lot]:
    return sorted(lots, key=lambda lot: lot.acquired_at)


def _last_in_first_out(lots: list[Lot]) -> list[Lot]:
    return sorted(lots, key=lambda lot: lot.acquired_at, reverse=True)


def _highest_in_first_out(lots: list[Lot]) -> list[Lot]:
    return sorted(lots, key=lambda lot: lot.unit_cost, reverse=True)


def _specific_id(lots: list[Lot]) -> list[Lot]:
    # No allocation list is supported yet; lots pass through as given.
    logger.debug("SPECID has no allocation rules; keeping input lot order", lots=len(lots))
    return list(lots)


_ORDERINGS: dict[AccountingMethod, Callable[[list[Lot]], list[Lot]]] = {
    AccountingMethod.FIFO: _first_in_first_out,
    AccountingMethod.LIFO: _last_in_first_out,
    AccountingMethod.HIFO: _highest_in_first_out,
    AccountingMethod.SPECID: _specific_id,
}


def order_lots(method: AccountingMethod, lots: Iterable[Lot]) -> list[Lot]:
    """
    Return `lots` in the order a sale should consume them under `method`.

    - FIFO: oldest `acquired_at` first.
    - LIFO: newest `acquired_at` first.
    - HIFO: highest `unit_cost` first (minimizes realized gain).
    - SPECID: input order, unchanged.

    The input is not mutated; a new list is returned.

    Args:
        method: Accounting method to apply.
        lots: Candidate lots (typically all open lots of one symbol).

    Returns:
        New list with the same lot objects in consumption order.
    """
    return _ORDERINGS[AccountingMethod(method)](list(lots))
