"""Input validation package."""

from financeflow.validation.validator import (
    LedgerValidationError,
    LedgerValidator,
    parse_amount,
)

__all__ = ["LedgerValidationError", "LedgerValidator", "parse_amount"]
