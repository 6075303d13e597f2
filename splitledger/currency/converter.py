"""
Display Currency Conversion

DESIGN DECISION: The ledger stores every amount in ONE base unit (USD).
Conversion happens only when an amount is shown to a user, or when a
user-entered amount is turned back into the base unit. Neither the
balance engine nor stored records ever see the selected currency.
"""

from pydantic import BaseModel, ConfigDict, Field


class UnknownCurrencyError(Exception):
    """Requested currency code is not available."""
    pass


class Currency(BaseModel):
    """A display currency and its rate relative to the base unit."""
    model_config = ConfigDict(frozen=True)

    code: str = Field(
        ...,
        min_length=3,
        max_length=3,
        description="ISO 4217 code"
    )
    name: str
    symbol: str
    rate: float = Field(
        ...,
        gt=0,
        description="Units of this currency per one base unit"
    )


BASE_CURRENCY = Currency(code="USD", name="US Dollar", symbol="$", rate=1.0)

# Fixed rates relative to USD (May 2025)
DEFAULT_CURRENCIES: dict[str, Currency] = {
    currency.code: currency
    for currency in (
        BASE_CURRENCY,
        Currency(code="EUR", name="Euro", symbol="€", rate=0.93),
        Currency(code="GBP", name="British Pound", symbol="£", rate=0.8),
        Currency(code="JPY", name="Japanese Yen", symbol="¥", rate=110.2),
        Currency(code="CAD", name="Canadian Dollar", symbol="C$", rate=1.35),
        Currency(code="AUD", name="Australian Dollar", symbol="A$", rate=1.45),
        Currency(code="INR", name="Indian Rupee", symbol="₹", rate=75.5),
        Currency(code="CNY", name="Chinese Yuan", symbol="¥", rate=7.1),
    )
}


def get_currency(code: str) -> Currency:
    """Look up a display currency by its code (case-insensitive)."""
    try:
        return DEFAULT_CURRENCIES[code.upper()]
    except KeyError:
        raise UnknownCurrencyError(
            f"Unknown currency: {code}. Available: {sorted(DEFAULT_CURRENCIES)}"
        ) from None


def convert(amount: float, rate: float) -> float:
    """Base unit -> display currency."""
    return amount * rate


def to_base(amount: float, rate: float) -> float:
    """Display currency -> base unit."""
    if rate <= 0:
        raise ValueError(f"Exchange rate must be positive, got {rate}")
    return amount / rate


def format_amount(amount: float, currency: Currency = BASE_CURRENCY) -> str:
    """
    Render a base-unit amount in the given display currency.

    Negative amounts keep their sign in front of the symbol: ``-$12.50``.
    """
    converted = convert(amount, currency.rate)
    sign = "-" if converted < 0 else ""
    return f"{sign}{currency.symbol}{abs(converted):,.2f}"
