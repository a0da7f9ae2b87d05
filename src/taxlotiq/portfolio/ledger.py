"""Trade ledger: deduplicated, time-ordered trade history of a portfolio."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from taxlotiq.exceptions import ValidationError
from taxlotiq.models import Trade
from taxlotiq.portfolio._builder import sort_trades

logger = structlog.get_logger()


def parse_trades(payload: Iterable[Trade | Mapping[str, Any]]) -> list[Trade]:
    """
    Validate a batch of trades.

    Args:
        payload: Trade models or raw mappings (e.g. decoded JSON objects).

    Returns:
        Validated trades in input order.

    Raises:
        ValidationError: If any trade is malformed; the whole batch is rejected.
    """
    if isinstance(payload, (str, bytes, Mapping)) or not isinstance(payload, Iterable):
        raise ValidationError("Trades must be a list of trade objects")

    trades: list[Trade] = []
    for index, raw in enumerate(payload):
        if isinstance(raw, Trade):
            trades.append(raw)
            continue
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Invalid trade payload at index {index}: expected an object")
        try:
            trades.append(Trade.model_validate(dict(raw)))
        except PydanticValidationError as e:
            trade_id = raw.get("client_trade_id")
            raise ValidationError(
                f"Invalid trade payload at index {index} (client_trade_id={trade_id!r})",
                errors=[dict(err) for err in e.errors(include_url=False, include_context=False)],
            ) from e
    return trades


@dataclass(frozen=True)
class IngestResult:
    """Outcome of ingesting a batch of trades."""

    accepted: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TradeLedger:
    """Immutable, timestamp-ordered trade history keyed by `client_trade_id`."""

    trades: tuple[Trade, ...] = ()

    def __len__(self) -> int:
        return len(self.trades)

    @property
    def trade_ids(self) -> frozenset[str]:
        """Identifiers of every trade in the ledger."""
        return frozenset(t.client_trade_id for t in self.trades)

    def ingest(self, trades: Iterable[Trade]) -> tuple[TradeLedger, IngestResult]:
        """
        Append trades not already present and return the re-sorted ledger.

        Idempotent rules:
        - Skip if the id already exists in the ledger (the original is kept).
        - Skip repeats of the same id inside the batch.

        Args:
            trades: Validated trades, in ingestion order.

        Returns:
            (new ledger, ingest result). The receiver is left unchanged.
        """
        existing_ids = set(self.trade_ids)
        appended: list[Trade] = []
        result = IngestResult()

        for trade in trades:
            if trade.client_trade_id in existing_ids:
                result.duplicates.append(trade.client_trade_id)
                continue
            existing_ids.add(trade.client_trade_id)
            appended.append(trade)
            result.accepted.append(trade.client_trade_id)

        if result.duplicates:
            logger.info("Skipped duplicate trades", duplicates=len(result.duplicates))

        ledger = TradeLedger(trades=tuple(sort_trades([*self.trades, *appended])))
        return ledger, result
