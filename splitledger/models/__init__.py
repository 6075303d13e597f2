"""
Data Models Package

This package contains all Pydantic models used by the Split Ledger.
All data flowing between the ledger's collaborators conforms to these schemas.
"""

from splitledger.models.ledger import (
    Balance,
    Expense,
    ExpenseType,
    LedgerSummary,
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

__all__ = [
    # Ledger models
    "Balance",
    "Expense",
    "ExpenseType",
    "LedgerSummary",
    "Participant",
    "RegularExpense",
    "SettlementExpense",
    "User",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
