"""
Core Data Models for the Split Ledger

These models describe the plain data that flows between the ledger's
collaborators and the balance engine:
1. Users of a group
2. Expenses and the participant shares inside them
3. Balances derived from the expenses

DESIGN DECISION: Models are frozen. The balance engine works on an
immutable snapshot, and a mutation of the ledger always produces a new
list of records instead of editing one in place.

All monetary values are floats in ONE canonical base unit.
Display currencies are converted at the presentation boundary only.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    model_validator,
)


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class ExpenseType(str, Enum):
    """
    Kind of expense record.

    A settlement is an expense where the debtor pays and the creditor is
    the sole participant. The balance engine treats both kinds the same;
    only totals and display care about the difference.
    """
    REGULAR = "regular"
    SETTLEMENT = "settlement"


# =============================================================================
# GROUP MEMBERS
# =============================================================================

class User(BaseModel):
    """A member of the group. Referenced everywhere else by ``id``."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=_new_id,
        min_length=1,
        description="Unique user identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    email: str = Field(
        default="",
        max_length=254,
        description="Contact email"
    )


class Participant(BaseModel):
    """The share one user owes toward a single expense."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(
        ...,
        alias="userId",
        min_length=1,
        description="Id of the user who owes this share"
    )
    share: float = Field(
        ...,
        ge=0,
        description="Amount owed, in the base unit"
    )


# =============================================================================
# EXPENSES
# =============================================================================

class _ExpenseBase(BaseModel):
    """
    Fields common to every expense record.

    NOTE: The sum of participant shares SHOULD equal ``amount``.
    The model does not enforce it; ExpenseValidator does, before an
    expense is accepted into the ledger.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(
        default_factory=_new_id,
        min_length=1,
        description="Unique expense identifier"
    )
    description: str = Field(
        default="",
        max_length=200,
        description="What the money was spent on"
    )
    amount: float = Field(
        ...,
        ge=0,
        description="Total amount, in the base unit"
    )
    date: datetime = Field(
        default_factory=_utcnow,
        description="When the expense happened"
    )
    paid_by: str = Field(
        ...,
        alias="paidBy",
        min_length=1,
        description="Id of the user who fronted the money"
    )
    participants: list[Participant] = Field(
        default_factory=list,
        description="Shares owed toward this expense"
    )
    category: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Free-form category label"
    )

    @property
    def share_total(self) -> float:
        """Sum of all participant shares."""
        return sum(p.share for p in self.participants)

    def involves(self, user_id: str) -> bool:
        """Check whether a user paid for or takes part in this expense."""
        return self.paid_by == user_id or any(
            p.user_id == user_id for p in self.participants
        )


class RegularExpense(_ExpenseBase):
    """A shared cost split between participants."""

    type: Literal["regular"] = "regular"


class SettlementExpense(_ExpenseBase):
    """
    A payment from one user to another that reduces a balance.

    The payer is the debtor. The single participant is the creditor,
    and their share is the whole amount.
    """

    type: Literal["settlement"] = "settlement"
    description: str = Field(default="Settlement", max_length=200)

    @model_validator(mode='after')
    def validate_single_receiver(self) -> 'SettlementExpense':
        """A settlement moves money between exactly two different users."""
        if len(self.participants) != 1:
            raise ValueError("Settlement must have exactly one participant")

        receiver = self.participants[0]
        if receiver.user_id == self.paid_by:
            raise ValueError("Settlement receiver cannot be the payer")
        if receiver.share != self.amount:
            raise ValueError("Settlement share must equal the settlement amount")

        return self

    @property
    def receiver_id(self) -> str:
        return self.participants[0].user_id


def _expense_type_tag(value) -> Optional[str]:
    # Records stored before the type field existed are regular expenses
    if isinstance(value, dict):
        tag = value.get("type") or ExpenseType.REGULAR
    else:
        tag = getattr(value, "type", ExpenseType.REGULAR)
    try:
        return ExpenseType(tag).value
    except ValueError:
        return None


Expense = Annotated[
    Union[
        Annotated[RegularExpense, Tag(ExpenseType.REGULAR.value)],
        Annotated[SettlementExpense, Tag(ExpenseType.SETTLEMENT.value)],
    ],
    Discriminator(_expense_type_tag),
]


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class Balance(BaseModel):
    """
    ``from_user`` owes ``to_user`` exactly ``amount``, net of every other
    obligation between the two.

    Balances are derived from expenses on demand and never persisted.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_user: str = Field(
        ...,
        alias="from",
        description="Debtor user id"
    )
    to_user: str = Field(
        ...,
        alias="to",
        description="Creditor user id"
    )
    amount: float = Field(
        ...,
        gt=0,
        description="Amount owed, in the base unit"
    )

    @property
    def pair(self) -> frozenset[str]:
        """The unordered pair of users this balance is about."""
        return frozenset((self.from_user, self.to_user))


class LedgerSummary(BaseModel):
    """Everything a dashboard needs, computed from one snapshot."""
    model_config = ConfigDict(frozen=True)

    total_expenses: float = Field(
        ...,
        description="Sum of regular expenses (settlements excluded)"
    )
    balances: list[Balance] = Field(default_factory=list)
    net_positions: dict[str, float] = Field(
        default_factory=dict,
        description="Net position per user id (positive = is owed)"
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'share_mismatch', 'unknown_user')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Errors block the write, warnings do not"
    )


class ValidationResult(BaseModel):
    """Outcome of checking an expense or a settlement before it is recorded."""

    subject_id: Optional[str] = Field(
        default=None,
        description="Id of the expense being validated, if any"
    )
    validated_at: datetime = Field(
        default_factory=_utcnow
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
