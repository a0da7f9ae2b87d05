"""Pydantic models for trades, marks and accounting methods."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from taxlotiq.constants import TIMESTAMP_RESOLUTION


class Side(str, Enum):
    """Trade direction."""

    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def _missing_(cls, value: object) -> Side | None:
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None


class AccountingMethod(str, Enum):
    """Lot selection methods.

    SPECID is accepted but has no allocation logic: lots pass through in the
    order they are given.
    """

    FIFO = "FIFO"
    LIFO = "LIFO"
    HIFO = "HIFO"
    SPECID = "SPECID"

    @classmethod
    def _missing_(cls, value: object) -> AccountingMethod | None:
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None


def _to_utc_millis(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


class Trade(BaseModel):
    """Single externally supplied BUY or SELL trade."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    client_trade_id: str = Field(min_length=1)
    """Caller-assigned unique identifier; ingestion is idempotent on it."""

    timestamp: datetime
    """Execution instant (UTC, millisecond resolution)."""

    symbol: str = Field(min_length=1)
    """Instrument symbol, e.g. BTC-USD."""

    side: Side
    """BUY opens a lot, SELL consumes lots."""

    qty: float = Field(gt=0)
    """Units traded."""

    price: float = Field(gt=0)
    """Price per unit."""

    fee: float | None = None
    """Transaction fee; allocated per unit into a BUY lot's cost basis."""

    fee_currency: str | None = None
    """Currency of `fee` (informational, no conversion is performed)."""

    @field_validator("side", mode="before")
    @classmethod
    def normalize_side(cls, value: object) -> object:
        """Accept `buy`/`sell` in any case."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC and truncate to milliseconds."""
        return _to_utc_millis(value)

    @property
    def fee_amount(self) -> float:
        """Fee as a number (0 when absent)."""
        return self.fee or 0.0


class Mark(BaseModel):
    """External price quote for a symbol."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    symbol: str = Field(min_length=1)
    """Instrument symbol."""

    price: float = Field(ge=0)
    """Mark price per unit; 0 is treated as no mark."""


def to_epoch_ms(value: datetime) -> int:
    """Return milliseconds since the Unix epoch for an aware or naive (UTC) datetime."""
    value = _to_utc_millis(value)
    return (value - datetime(1970, 1, 1, tzinfo=UTC)) // TIMESTAMP_RESOLUTION


_INSTANT_ADAPTER: TypeAdapter[datetime] = TypeAdapter(datetime)


def parse_instant(value: datetime | str) -> datetime:
    """Parse an ISO-8601 string (or datetime) into a UTC, millisecond-resolution instant.

    Raises:
        pydantic.ValidationError: If the value is not a recognizable timestamp.
    """
    return _to_utc_millis(_INSTANT_ADAPTER.validate_python(value))
