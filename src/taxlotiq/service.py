"""Tax-lot service: portfolio registration, trade ingest and P&L queries.

Each public method implements one request/response contract. Requests are
validated before anything is written, so a rejected request has no effect.
Open lots are rebuilt from the full ledger on every ingest; realized P&L replays
the ledger on every query.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime  # noqa: TC003 - Required at runtime for pydantic schemas
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from taxlotiq.config import EngineConfig, get_config
from taxlotiq.exceptions import PortfolioNotFoundError, ValidationError
from taxlotiq.models import AccountingMethod, Mark, Trade, parse_instant
from taxlotiq.portfolio._builder import build_open_lots
from taxlotiq.portfolio._lot_models import Lot, PositionResult, RealizedTradeResult
from taxlotiq.portfolio.ledger import parse_trades
from taxlotiq.portfolio.pnl import PnLCalculator
from taxlotiq.portfolio.repository import InMemoryPortfolioRepository, PortfolioState

logger = structlog.get_logger()


class PortfolioAck(BaseModel):
    """Response to registering or updating a portfolio."""

    model_config = ConfigDict(frozen=True)

    portfolio_id: str
    updated: bool = True


class IngestResponse(BaseModel):
    """Response to a trade ingest."""

    model_config = ConfigDict(frozen=True)

    portfolio_id: str
    accepted: list[str]
    duplicates: list[str]
    total_trades: int
    open_lots: int


class RealizedPnLResponse(BaseModel):
    """Realized P&L per sell inside the requested window."""

    model_config = ConfigDict(frozen=True)

    portfolio_id: str
    method: AccountingMethod
    currency: str
    start: datetime
    end: datetime
    realized: list[RealizedTradeResult]

    @property
    def total_pnl(self) -> float:
        """Sum of realized P&L across results."""
        return sum(r.pnl for r in self.realized)


class UnrealizedPnLResponse(BaseModel):
    """Mark-to-market P&L per symbol of the open lots."""

    model_config = ConfigDict(frozen=True)

    portfolio_id: str
    method: AccountingMethod
    currency: str
    positions: list[PositionResult]


class OpenLotsResponse(BaseModel):
    """Current open lots of a portfolio."""

    model_config = ConfigDict(frozen=True)

    portfolio_id: str
    open_lots: list[Lot]


def _require_id(portfolio_id: str | None) -> str:
    if not isinstance(portfolio_id, str) or not portfolio_id.strip():
        raise ValidationError("Missing portfolio_id")
    return portfolio_id


def _parse_method(method: AccountingMethod | str | None) -> AccountingMethod:
    try:
        return AccountingMethod(method)
    except ValueError:
        allowed = ", ".join(m.value for m in AccountingMethod)
        raise ValidationError(f"Invalid method {method!r}; expected one of: {allowed}") from None


def _parse_instant(name: str, value: datetime | str | None) -> datetime:
    if value is None or value == "":
        raise ValidationError(f"Missing {name}")
    try:
        return parse_instant(value)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {name} timestamp: {value!r}",
            errors=[dict(err) for err in e.errors(include_url=False, include_context=False)],
        ) from e


def _parse_marks(
    marks: Mapping[str, float] | Iterable[Mark | Mapping[str, Any]] | None,
) -> dict[str, float]:
    if marks is None:
        return {}
    items: Iterable[Any]
    if isinstance(marks, Mapping):
        items = [{"symbol": symbol, "price": price} for symbol, price in marks.items()]
    else:
        items = marks

    prices: dict[str, float] = {}
    for raw in items:
        try:
            mark = raw if isinstance(raw, Mark) else Mark.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid mark payload: {raw!r}",
                errors=[dict(err) for err in e.errors(include_url=False, include_context=False)],
            ) from e
        prices[mark.symbol] = mark.price
    return prices


def _copy_lots(lots: Iterable[Lot]) -> list[Lot]:
    return [replace(lot) for lot in lots]


class TaxLotService:
    """Portfolio-level entry point for the tax-lot engine."""

    def __init__(
        self,
        repository: InMemoryPortfolioRepository | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            repository: Portfolio store (a fresh in-memory store by default).
            config: Engine defaults (the global config by default).
        """
        self.repository = repository or InMemoryPortfolioRepository()
        self.config = config or get_config()
        self.calculator = PnLCalculator()

    def register_portfolio(
        self, portfolio_id: str, base_currency: str | None = None
    ) -> PortfolioAck:
        """
        Create a portfolio, or update the base currency of an existing one.

        Existing trades and lots are kept when a portfolio is re-registered. The base
        currency is stored as given.

        Raises:
            ValidationError: If the id or base currency is missing.
        """
        portfolio_id = _require_id(portfolio_id)
        if base_currency is None:
            base_currency = self.config.default_base_currency
        if not isinstance(base_currency, str) or not base_currency.strip():
            raise ValidationError("Missing base_currency")
        currency = base_currency

        def _register(state: PortfolioState | None) -> tuple[PortfolioState, bool]:
            if state is None:
                return PortfolioState(portfolio_id=portfolio_id, base_currency=currency), True
            return state.with_base_currency(currency), False

        created = self.repository.mutate(portfolio_id, _register)
        logger.info(
            "Registered portfolio" if created else "Updated portfolio",
            portfolio_id=portfolio_id,
            base_currency=currency,
        )
        return PortfolioAck(portfolio_id=portfolio_id, updated=True)

    def ingest_trades(
        self,
        portfolio_id: str,
        trades: Iterable[Trade | Mapping[str, Any]],
    ) -> IngestResponse:
        """
        Append new trades and rebuild the portfolio's open lots.

        Trades whose `client_trade_id` is already known are reported as duplicates
        and never replace the original.

        Raises:
            PortfolioNotFoundError: If the portfolio is not registered.
            ValidationError: If any trade is malformed (nothing is ingested).
        """
        portfolio_id = _require_id(portfolio_id)
        if trades is None:
            raise ValidationError("Missing trades")
        self.repository.load(portfolio_id)
        parsed = parse_trades(trades)

        def _ingest(state: PortfolioState | None) -> tuple[PortfolioState, IngestResponse]:
            if state is None:
                raise PortfolioNotFoundError(portfolio_id)
            ledger, result = state.ledger.ingest(parsed)
            open_lots = tuple(build_open_lots(ledger.trades))
            response = IngestResponse(
                portfolio_id=portfolio_id,
                accepted=result.accepted,
                duplicates=result.duplicates,
                total_trades=len(ledger),
                open_lots=len(open_lots),
            )
            return replace(state, ledger=ledger, open_lots=open_lots), response

        response = self.repository.mutate(portfolio_id, _ingest)
        logger.info(
            "Ingested trades",
            portfolio_id=portfolio_id,
            accepted=len(response.accepted),
            duplicates=len(response.duplicates),
            total_trades=response.total_trades,
            open_lots=response.open_lots,
        )
        return response

    def realized_pnl(
        self,
        portfolio_id: str,
        start: datetime | str | None,
        end: datetime | str | None,
        method: AccountingMethod | str | None,
    ) -> RealizedPnLResponse:
        """
        Realized P&L for sells executed in [start, end] under `method`.

        Raises:
            PortfolioNotFoundError: If the portfolio is not registered.
            ValidationError: If start, end or method is missing or invalid.
        """
        state = self.repository.load(_require_id(portfolio_id))
        start_at = _parse_instant("from", start)
        end_at = _parse_instant("to", end)
        if method is None or method == "":
            raise ValidationError("Missing method")
        lot_method = _parse_method(method)

        realized = self.calculator.calculate_realized(
            state.ledger.trades, start=start_at, end=end_at, method=lot_method
        )
        return RealizedPnLResponse(
            portfolio_id=state.portfolio_id,
            method=lot_method,
            currency=state.base_currency,
            start=start_at,
            end=end_at,
            realized=realized,
        )

    def unrealized_pnl(
        self,
        portfolio_id: str,
        marks: Mapping[str, float] | Iterable[Mark | Mapping[str, Any]] | None = None,
        method: AccountingMethod | str | None = None,
    ) -> UnrealizedPnLResponse:
        """
        Mark-to-market P&L of the open lots, grouped by symbol.

        Open lots come from the FIFO inventory baseline; `method` (default from
        config) only orders them within each position.

        Raises:
            PortfolioNotFoundError: If the portfolio is not registered.
            ValidationError: If the method or a mark is invalid.
        """
        state = self.repository.load(_require_id(portfolio_id))
        lot_method = _parse_method(method or self.config.default_method)
        prices = _parse_marks(marks)

        positions = self.calculator.calculate_unrealized(
            _copy_lots(state.open_lots), method=lot_method, marks=prices
        )
        return UnrealizedPnLResponse(
            portfolio_id=state.portfolio_id,
            method=lot_method,
            currency=state.base_currency,
            positions=positions,
        )

    def list_open_lots(self, portfolio_id: str) -> OpenLotsResponse:
        """
        Current open lots in acquisition order.

        Raises:
            PortfolioNotFoundError: If the portfolio is not registered.
        """
        state = self.repository.load(_require_id(portfolio_id))
        return OpenLotsResponse(
            portfolio_id=state.portfolio_id,
            open_lots=_copy_lots(state.open_lots),
        )
