"""Display currency package."""

from splitledger.currency.converter import (
    BASE_CURRENCY,
    DEFAULT_CURRENCIES,
    Currency,
    UnknownCurrencyError,
    convert,
    format_amount,
    get_currency,
    to_base,
)

__all__ = [
    "BASE_CURRENCY",
    "DEFAULT_CURRENCIES",
    "Currency",
    "UnknownCurrencyError",
    "convert",
    "format_amount",
    "get_currency",
    "to_base",
]
