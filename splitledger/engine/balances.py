"""
Balance Engine

Turns a snapshot of expenses into the net debts between group members.

ALGORITHM:
1. Start a zero accumulator for every ordered pair of distinct users.
2. For every participant who is not the payer, add their share to
   (participant -> payer). The opposite direction is left alone.
3. Net each unordered pair once: the larger direction wins and only
   the difference is emitted. Equal totals emit nothing.

GUARANTEES:
- At most one Balance per unordered pair of users
- Every Balance amount is strictly positive
- Same inputs give the same set of balances

Settlements need no special handling: the debtor pays, the creditor is
the only participant, so the payment lands in the opposite direction of
the debt and cancels it during netting.

Contributions that name a user who is not in ``users`` are skipped and
logged. Rejecting such expenses is the validator's job, not ours.
"""

from itertools import combinations
from typing import Iterable, Sequence

import structlog

from splitledger.models.ledger import (
    Balance,
    Expense,
    ExpenseType,
    LedgerSummary,
    User,
)


logger = structlog.get_logger(__name__)


def compute_balances(
    expenses: Iterable[Expense],
    users: Sequence[User],
) -> list[Balance]:
    """
    Compute the simplified, directed debts between users.

    Args:
        expenses: Regular and settlement expenses, in any order
        users: Known group members; only ``id`` is used

    Returns:
        One Balance per indebted pair, ordered by user id pair
    """
    user_ids = sorted({user.id for user in users})

    # owed[(a, b)] is the raw total a owes b
    owed: dict[tuple[str, str], float] = {
        (a, b): 0.0
        for a in user_ids
        for b in user_ids
        if a != b
    }

    for expense in expenses:
        for participant in expense.participants:
            if participant.user_id == expense.paid_by:
                continue

            key = (participant.user_id, expense.paid_by)
            if key not in owed:
                logger.warning(
                    "balance_contribution_skipped",
                    expense_id=expense.id,
                    paid_by=expense.paid_by,
                    participant=participant.user_id,
                    share=participant.share,
                )
                continue

            owed[key] += participant.share

    balances = []
    for a, b in combinations(user_ids, 2):
        a_owes_b = owed[(a, b)]
        b_owes_a = owed[(b, a)]

        if a_owes_b > b_owes_a:
            balances.append(Balance(from_user=a, to_user=b, amount=a_owes_b - b_owes_a))
        elif b_owes_a > a_owes_b:
            balances.append(Balance(from_user=b, to_user=a, amount=b_owes_a - a_owes_b))

    return balances


def total_expenses(expenses: Iterable[Expense]) -> float:
    """Total spent by the group. Settlements move money, they are not spending."""
    return sum(
        expense.amount
        for expense in expenses
        if expense.type != ExpenseType.SETTLEMENT
    )


def net_position(balances: Iterable[Balance], user_id: str) -> float:
    """
    What a user is owed minus what they owe.

    Positive: net creditor. Negative: net debtor. Zero: settled.
    """
    owed_to_user = 0.0
    owed_by_user = 0.0

    for balance in balances:
        if balance.to_user == user_id:
            owed_to_user += balance.amount
        if balance.from_user == user_id:
            owed_by_user += balance.amount

    return owed_to_user - owed_by_user


def summarize(
    expenses: Sequence[Expense],
    users: Sequence[User],
) -> LedgerSummary:
    """Compute totals, balances and every user's net position in one pass."""
    balances = compute_balances(expenses, users)

    return LedgerSummary(
        total_expenses=total_expenses(expenses),
        balances=balances,
        net_positions={
            user.id: net_position(balances, user.id)
            for user in users
        },
    )
