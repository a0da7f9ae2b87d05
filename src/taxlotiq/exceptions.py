"""Custom exceptions for the tax-lot engine."""

from __future__ import annotations

from typing import Any


class TaxlotError(Exception):
    """Base exception for tax-lot engine errors."""


class ValidationError(TaxlotError):
    """Request is missing or has malformed required fields.

    Raised before any mutation, so a rejected request never has partial effects.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class NotFoundError(TaxlotError):
    """Operation referenced an entity that does not exist."""


class PortfolioNotFoundError(NotFoundError):
    """Portfolio id has not been registered."""

    def __init__(self, portfolio_id: str) -> None:
        self.portfolio_id = portfolio_id
        super().__init__(f"Portfolio not found: {portfolio_id}")
