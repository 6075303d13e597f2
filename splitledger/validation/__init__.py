"""Input validation package."""

from splitledger.validation.validator import (
    ExpenseValidator,
    split_custom,
    split_equally,
)

__all__ = ["ExpenseValidator", "split_custom", "split_equally"]
