"""
Tests for Split Ledger models

Test strategy:
1. Unit tests for individual components (models, engine, validator)
2. Flow tests for LedgerService over in-memory storage
3. No real files outside pytest's tmp_path
"""

import pytest
from datetime import datetime
from pydantic import TypeAdapter, ValidationError

from splitledger.models.ledger import (
    Balance,
    Expense,
    ExpenseType,
    Participant,
    RegularExpense,
    SettlementExpense,
    User,
    ValidationIssue,
    ValidationResult,
)
from splitledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from uuid import uuid4


expense_adapter = TypeAdapter(Expense)


class TestLedgerModels:
    """Tests for ledger Pydantic models."""

    def test_user_creation(self):
        """Test User model creation."""
        user = User(id="user1", name="You", email="you@example.com")
        assert user.id == "user1"
        assert user.name == "You"

    def test_user_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        user = User(id="user2", name="  Alex  ")
        assert user.name == "Alex"

    def test_user_generates_id(self):
        """Test that a missing id is generated."""
        assert User(name="Sam").id

    def test_models_are_frozen(self):
        """Test that records cannot be edited in place."""
        user = User(id="user1", name="You")
        with pytest.raises(ValidationError):
            user.name = "Me"

    def test_participant_rejects_negative_share(self):
        """Test that negative shares are rejected."""
        with pytest.raises(ValidationError):
            Participant(user_id="user1", share=-5)

    def test_participant_accepts_alias(self):
        """Test the stored camelCase field name."""
        participant = Participant.model_validate({"userId": "user1", "share": 10})
        assert participant.user_id == "user1"

    def test_regular_expense_defaults(self):
        """Test RegularExpense model creation."""
        expense = RegularExpense(
            description="Dinner",
            amount=90,
            paid_by="user1",
            participants=[Participant(user_id="user2", share=90)],
        )
        assert expense.type == ExpenseType.REGULAR
        assert isinstance(expense.date, datetime)
        assert expense.share_total == 90
        assert expense.involves("user2")
        assert not expense.involves("user3")

    def test_balance_requires_positive_amount(self):
        """Test that zero-amount balances cannot exist."""
        with pytest.raises(ValidationError):
            Balance(from_user="a", to_user="b", amount=0)

    def test_balance_aliases(self):
        """Test Balance loads from from/to keys."""
        balance = Balance.model_validate({"from": "a", "to": "b", "amount": 5})
        assert balance.from_user == "a"
        assert balance.pair == frozenset({"a", "b"})


class TestSettlementExpense:
    """Tests for the settlement variant."""

    def test_settlement_creation(self):
        """Test a well-formed settlement."""
        settlement = SettlementExpense(
            amount=100,
            paid_by="user2",
            participants=[Participant(user_id="user1", share=100)],
        )
        assert settlement.type == ExpenseType.SETTLEMENT
        assert settlement.description == "Settlement"
        assert settlement.receiver_id == "user1"

    def test_settlement_needs_one_participant(self):
        """Test that a settlement has exactly one receiver."""
        with pytest.raises(ValueError, match="exactly one participant"):
            SettlementExpense(
                amount=100,
                paid_by="user2",
                participants=[
                    Participant(user_id="user1", share=50),
                    Participant(user_id="user3", share=50),
                ],
            )

    def test_settlement_receiver_not_payer(self):
        """Test that nobody settles with themselves."""
        with pytest.raises(ValueError, match="cannot be the payer"):
            SettlementExpense(
                amount=10,
                paid_by="user1",
                participants=[Participant(user_id="user1", share=10)],
            )

    def test_settlement_share_matches_amount(self):
        """Test that the receiver's share is the whole amount."""
        with pytest.raises(ValueError, match="must equal"):
            SettlementExpense(
                amount=10,
                paid_by="user1",
                participants=[Participant(user_id="user2", share=9)],
            )


class TestExpenseUnion:
    """Tests for loading the tagged Expense union from stored records."""

    def test_loads_regular(self):
        """Test a stored regular expense."""
        expense = expense_adapter.validate_python({
            "id": "e1",
            "description": "Taxi",
            "amount": 20,
            "date": "2025-05-01T10:00:00Z",
            "paidBy": "user1",
            "participants": [{"userId": "user2", "share": 20}],
            "type": "regular",
        })
        assert isinstance(expense, RegularExpense)
        assert expense.paid_by == "user1"

    def test_missing_type_is_regular(self):
        """Test that records without a type load as regular expenses."""
        expense = expense_adapter.validate_python({
            "amount": 20,
            "paidBy": "user1",
            "participants": [],
        })
        assert isinstance(expense, RegularExpense)

    def test_loads_settlement(self):
        """Test a stored settlement."""
        expense = expense_adapter.validate_python({
            "id": "settlement-1",
            "amount": 15,
            "paidBy": "user2",
            "participants": [{"userId": "user1", "share": 15}],
            "type": "settlement",
        })
        assert isinstance(expense, SettlementExpense)

    def test_unknown_type_rejected(self):
        """Test that the variant is closed."""
        with pytest.raises(ValidationError):
            expense_adapter.validate_python({
                "amount": 1,
                "paidBy": "user1",
                "type": "refund",
            })

    def test_dump_uses_stored_field_names(self):
        """Test serialization back to the stored format."""
        expense = RegularExpense(
            id="e1",
            amount=10,
            paid_by="user1",
            participants=[Participant(user_id="user2", share=10)],
        )
        data = expense_adapter.dump_python(expense, mode="json", by_alias=True)
        assert data["paidBy"] == "user1"
        assert data["participants"] == [{"userId": "user2", "share": 10.0}]
        assert data["type"] == "regular"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added(
            expense_id="e1",
            description="Dinner",
            amount=90.0,
            correlation_id=uuid4(),
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == "e1"
        assert log_dict["details"]["amount"] == 90.0

    def test_removal_blocked_is_warning(self):
        """Test AuditEventBuilder.user_removal_blocked."""
        correlation_id = uuid4()
        event = AuditEventBuilder.user_removal_blocked(
            user_id="user2",
            reason="Settle up first.",
            correlation_id=correlation_id,
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.correlation_id == correlation_id

    def test_storage_error_is_error(self):
        """Test AuditEventBuilder.storage_error."""
        event = AuditEventBuilder.storage_error(
            operation="save_expenses",
            error_message="disk full",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be greater than zero",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="participants",
                    issue_type="no_effect",
                    message="Only the payer takes part",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.warnings == ["Only the payer takes part"]

    def test_issue_severity_pattern(self):
        """Test that severities are limited to error and warning."""
        with pytest.raises(ValidationError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="info")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
