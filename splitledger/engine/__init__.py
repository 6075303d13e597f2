"""Balance computation package."""

from splitledger.engine.balances import (
    compute_balances,
    net_position,
    summarize,
    total_expenses,
)

__all__ = [
    "compute_balances",
    "net_position",
    "summarize",
    "total_expenses",
]
