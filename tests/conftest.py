"""
Shared test fixtures.

PHILOSOPHY: Use REAL objects wherever possible.
- Real Pydantic trades (not dicts pretending to be models)
- Real in-memory repository and service
- CliRunner for the CLI boundary
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest

from taxlotiq.config import EngineConfig, set_config
from taxlotiq.models import Trade
from taxlotiq.service import TaxLotService

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _reset_engine_config() -> Iterator[None]:
    set_config(EngineConfig())
    yield
    set_config(EngineConfig())


@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    """Factory for real Trade models.

    `day` is an offset in days from 2024-01-01T00:00:00Z.
    """

    def _make(
        client_trade_id: str,
        side: str,
        qty: float,
        price: float,
        *,
        symbol: str = "BTC-USD",
        day: float = 0,
        fee: float | None = None,
    ) -> Trade:
        return Trade(
            client_trade_id=client_trade_id,
            timestamp=BASE_TIME + timedelta(days=day),
            symbol=symbol,
            side=side,
            qty=qty,
            price=price,
            fee=fee,
        )

    return _make


@pytest.fixture
def make_trade_payload() -> Callable[..., dict[str, Any]]:
    """Factory for raw trade payloads (decoded-JSON shape)."""

    def _make(
        client_trade_id: str,
        side: str,
        qty: float,
        price: float,
        *,
        symbol: str = "BTC-USD",
        timestamp: str = "2024-01-01T00:00:00Z",
        **extra: Any,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "client_trade_id": client_trade_id,
            "timestamp": timestamp,
            "symbol": symbol,
            "side": side,
            "qty": qty,
            "price": price,
        }
        payload.update(extra)
        return payload

    return _make


@pytest.fixture
def service() -> TaxLotService:
    """Service with a fresh in-memory repository and one registered USD portfolio."""
    svc = TaxLotService()
    svc.register_portfolio("p1", "USD")
    return svc
