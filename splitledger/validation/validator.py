"""
Expense and Settlement Validation

DESIGN DECISION: The balance engine trusts its input. Everything a user
can get wrong when entering an expense is caught here, BEFORE the
expense reaches the ledger:

STAGE 1 - FIELD CHECKS:
- Description present
- Amount positive
- At least one participant

STAGE 2 - GROUP CHECKS:
- Payer and participants are group members
- No participant listed twice
- Shares add up to the amount (within tolerance)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the caller can show them to the user.
"""

from collections import Counter
from typing import Iterable, Optional, Sequence

from splitledger.config import LedgerSettings, get_settings
from splitledger.models.ledger import (
    Balance,
    Expense,
    ExpenseType,
    Participant,
    User,
    ValidationIssue,
    ValidationResult,
)


def split_equally(amount: float, user_ids: Sequence[str]) -> list[Participant]:
    """
    Split an amount into equal shares.

    Raises:
        ValueError: If no users are given
    """
    if not user_ids:
        raise ValueError("Cannot split an expense between zero participants")

    share = amount / len(user_ids)
    return [Participant(user_id=user_id, share=share) for user_id in user_ids]


def split_custom(shares: dict[str, float]) -> list[Participant]:
    """Build participants from explicit per-user shares."""
    return [
        Participant(user_id=user_id, share=share)
        for user_id, share in shares.items()
    ]


class ExpenseValidator:
    """
    Validates expenses and settlements against the current group.

    Stage 1 runs on the expense alone.
    Stage 2 needs the list of group members.
    """

    def __init__(
        self,
        users: Iterable[User],
        settings: Optional[LedgerSettings] = None,
    ):
        self._user_ids = {user.id for user in users}
        self._settings = settings or get_settings()

    def _validate_fields(self, expense: Expense) -> list[ValidationIssue]:
        issues = []

        if not expense.description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Please enter a description",
                severity="error",
            ))

        if expense.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))

        if not expense.participants:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="missing",
                message="Please select at least one participant",
                severity="error",
            ))

        return issues

    def _validate_group(self, expense: Expense) -> list[ValidationIssue]:
        issues = []

        if expense.paid_by not in self._user_ids:
            issues.append(ValidationIssue(
                field="paid_by",
                issue_type="unknown_user",
                message=f"Payer {expense.paid_by} is not a member of this group",
                severity="error",
            ))

        counts = Counter(p.user_id for p in expense.participants)
        for user_id, count in counts.items():
            if user_id not in self._user_ids:
                issues.append(ValidationIssue(
                    field="participants",
                    issue_type="unknown_user",
                    message=f"Participant {user_id} is not a member of this group",
                    severity="error",
                ))
            if count > 1:
                issues.append(ValidationIssue(
                    field="participants",
                    issue_type="duplicate_participant",
                    message=f"Participant {user_id} is listed {count} times",
                    severity="error",
                ))

        share_total = expense.share_total
        if (
            expense.type == ExpenseType.REGULAR
            and expense.participants
            and abs(share_total - expense.amount) > self._settings.share_tolerance
        ):
            issues.append(ValidationIssue(
                field="participants",
                issue_type="share_mismatch",
                message=(
                    f"The sum of shares ({share_total:.2f}) doesn't match "
                    f"the expense amount ({expense.amount:.2f})"
                ),
                severity="error",
            ))

        if counts and set(counts) == {expense.paid_by}:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="no_effect",
                message="Only the payer takes part, so nobody owes anything",
                severity="warning",
            ))

        return issues

    def validate_expense(self, expense: Expense) -> ValidationResult:
        """
        Run both stages on an expense.

        Stage 2 is skipped when stage 1 finds errors; group checks on a
        malformed expense only add noise.
        """
        issues = self._validate_fields(expense)

        if not any(issue.severity == "error" for issue in issues):
            issues.extend(self._validate_group(expense))

        return ValidationResult(subject_id=expense.id, issues=issues)

    def validate_settlement(
        self,
        balance: Balance,
        amount: float,
        rate: float = 1.0,
    ) -> ValidationResult:
        """
        Check an amount a debtor wants to pay against what they owe.

        Partial payments are fine; paying more than the balance is not.
        ``amount`` is in base units; ``rate`` is the rate of the currency it
        was entered in, so the allowed slack is one cent of that currency.
        """
        issues = []

        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Please enter a valid amount",
                severity="error",
            ))
        elif amount > balance.amount + self._settings.share_tolerance / rate:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="overpayment",
                message=(
                    f"Amount ({amount:.2f}) is more than the "
                    f"outstanding balance ({balance.amount:.2f})"
                ),
                severity="error",
            ))

        return ValidationResult(issues=issues)

    @staticmethod
    def summarize(result: ValidationResult) -> str:
        """Generate the message shown to the user."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        errors = [issue for issue in result.issues if issue.severity == "error"]
        if errors:
            lines.append("This expense can't be saved yet:")
            lines.extend(f"   • {issue.message}" for issue in errors)

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check:")
            lines.extend(f"   • {warning}" for warning in result.warnings)

        return "\n".join(lines)
