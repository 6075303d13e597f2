"""
Ledger Orchestrator

This module ties the components together. LedgerService owns the
group's users and expenses and defines the flows for:
1. Loading the ledger from storage
2. Adding and deleting expenses (validate -> append -> persist)
3. Adding and removing group members
4. Recording settlements against current balances

DESIGN DECISION: Balances are never stored. They are recomputed from the
current snapshot every time they are asked for, so they cannot drift
from the expenses they are derived from.

A mutation replaces the in-memory list only after the store accepted
the new list. A failed save leaves the ledger as it was.
"""

from typing import Optional, Sequence

from splitledger.audit import AuditLogger, create_correlation_id
from splitledger.config import LedgerSettings, get_settings
from splitledger.currency import Currency, UnknownCurrencyError, get_currency, to_base
from splitledger.engine import compute_balances, net_position, total_expenses
from splitledger.models.ledger import (
    Balance,
    Expense,
    LedgerSummary,
    Participant,
    SettlementExpense,
    User,
    ValidationResult,
)
from splitledger.services.storage import (
    CorruptDataError,
    InMemoryKeyValueStore,
    LedgerRepository,
    StorageError,
)
from splitledger.validation import ExpenseValidator


# Group seeded into an empty store; "user1" is the person using the app
DEFAULT_USERS: tuple[User, ...] = (
    User(id="user1", name="You", email="you@example.com"),
    User(id="user2", name="Alex", email="alex@example.com"),
    User(id="user3", name="Sam", email="sam@example.com"),
    User(id="user4", name="Taylor", email="taylor@example.com"),
)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ExpenseRejectedError(LedgerError):
    """Expense failed validation and was not recorded."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(ExpenseValidator.summarize(result))


class NotFoundError(LedgerError):
    """Referenced expense or user does not exist."""
    pass


class DuplicateUserError(LedgerError):
    """A user with the same id is already in the group."""
    pass


class UserRemovalError(LedgerError):
    """User cannot be removed from the group right now."""
    pass


class SettlementError(LedgerError):
    """Settlement does not match an outstanding balance."""

    def __init__(self, message: str, result: Optional[ValidationResult] = None):
        self.result = result
        super().__init__(message)


class LedgerService:
    """
    The owning collaborator of one group's ledger.

    Single writer: callers must not interleave mutations on the same
    service from different tasks.
    """

    def __init__(
        self,
        repository: Optional[LedgerRepository] = None,
        current_user_id: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._repository = repository or LedgerRepository(InMemoryKeyValueStore())
        self._current_user_id = current_user_id
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings()

        self._users: list[User] = []
        self._expenses: list[Expense] = []
        self._currency: Currency = get_currency(self._settings.default_currency)

    # -------------------------------------------------------------------------
    # Snapshot access
    # -------------------------------------------------------------------------

    @property
    def users(self) -> list[User]:
        return list(self._users)

    @property
    def expenses(self) -> list[Expense]:
        return list(self._expenses)

    @property
    def currency(self) -> Currency:
        return self._currency

    @property
    def balances(self) -> list[Balance]:
        """
        Current balances, without float dust.

        Netting ``y + (x - y)`` against ``x`` can leave a sub-cent entry
        after a full settlement; anything within ``share_tolerance`` is
        treated as settled.
        """
        return [
            balance
            for balance in compute_balances(self._expenses, self._users)
            if balance.amount > self._settings.share_tolerance
        ]

    def summary(self) -> LedgerSummary:
        balances = self.balances
        return LedgerSummary(
            total_expenses=total_expenses(self._expenses),
            balances=balances,
            net_positions={
                user.id: net_position(balances, user.id)
                for user in self._users
            },
        )

    def get_user(self, user_id: str) -> User:
        for user in self._users:
            if user.id == user_id:
                return user
        raise NotFoundError(f"User not found: {user_id}")

    def validator(self) -> ExpenseValidator:
        """Validator bound to the current group members."""
        return ExpenseValidator(self._users, self._settings)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load(self, default_users: Sequence[User] = DEFAULT_USERS) -> None:
        """
        Load users, expenses and the display currency from storage.

        When no users were ever saved, ``default_users`` seed the group
        and are persisted right away.

        Raises:
            StorageError: If stored data cannot be read or decoded
            NotFoundError: If the current user is not a group member
        """
        correlation_id = create_correlation_id()

        try:
            users = await self._repository.load_users()
            if users is None:
                users = list(default_users)
                if users:
                    await self._repository.save_users(users)

            expenses = await self._repository.load_expenses()
            currency_code = await self._repository.load_currency_code()

            currency = self._currency
            if currency_code:
                try:
                    currency = get_currency(currency_code)
                except UnknownCurrencyError as e:
                    raise CorruptDataError(f"Stored currency is invalid: {e}") from e
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation="load",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        if self._current_user_id is not None and not any(
            user.id == self._current_user_id for user in users
        ):
            raise NotFoundError(
                f"Current user {self._current_user_id} is not a member of this group"
            )

        self._users = users
        self._expenses = expenses
        self._currency = currency

        await self._audit_logger.log_ledger_loaded(
            user_count=len(self._users),
            expense_count=len(self._expenses),
            correlation_id=correlation_id,
        )

    async def _save_users(self, users: list[User], correlation_id) -> None:
        try:
            await self._repository.save_users(users)
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation="save_users",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        self._users = users

    async def _save_expenses(self, expenses: list[Expense], correlation_id) -> None:
        try:
            await self._repository.save_expenses(expenses)
        except StorageError as e:
            await self._audit_logger.log_storage_error(
                operation="save_expenses",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        self._expenses = expenses

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def add_expense(self, expense: Expense) -> LedgerSummary:
        """
        Validate and record an expense.

        Raises:
            ExpenseRejectedError: If validation finds errors
        """
        correlation_id = create_correlation_id()

        result = self.validator().validate_expense(expense)
        if result.has_errors:
            await self._audit_logger.log_expense_rejected(
                expense_id=expense.id,
                issues=[issue.model_dump() for issue in result.issues],
                correlation_id=correlation_id,
            )
            raise ExpenseRejectedError(result)

        await self._save_expenses([*self._expenses, expense], correlation_id)

        await self._audit_logger.log_expense_added(
            expense_id=expense.id,
            description=expense.description,
            amount=expense.amount,
            correlation_id=correlation_id,
        )
        return self.summary()

    async def delete_expense(self, expense_id: str) -> LedgerSummary:
        correlation_id = create_correlation_id()

        remaining = [e for e in self._expenses if e.id != expense_id]
        if len(remaining) == len(self._expenses):
            raise NotFoundError(f"Expense not found: {expense_id}")

        await self._save_expenses(remaining, correlation_id)
        await self._audit_logger.log_expense_deleted(
            expense_id=expense_id,
            correlation_id=correlation_id,
        )
        return self.summary()

    # -------------------------------------------------------------------------
    # Group members
    # -------------------------------------------------------------------------

    async def add_user(self, user: User) -> User:
        correlation_id = create_correlation_id()

        if any(existing.id == user.id for existing in self._users):
            raise DuplicateUserError(f"User already in group: {user.id}")

        await self._save_users([*self._users, user], correlation_id)
        await self._audit_logger.log_user_added(
            user_id=user.id,
            name=user.name,
            correlation_id=correlation_id,
        )
        return user

    async def remove_user(self, user_id: str) -> None:
        """
        Remove a member from the group.

        Raises:
            NotFoundError: If the user is not in the group
            UserRemovalError: If the group would get too small, the user
                is the current user, or the user has expenses
        """
        correlation_id = create_correlation_id()
        self.get_user(user_id)

        reason = None
        if len(self._users) <= self._settings.min_group_size:
            reason = (
                f"You need at least {self._settings.min_group_size} "
                "people to split expenses."
            )
        elif user_id == self._current_user_id:
            reason = "You cannot remove yourself."
        elif any(expense.involves(user_id) for expense in self._expenses):
            reason = "This person is involved in expenses. Settle up first."

        if reason:
            await self._audit_logger.log_user_removal_blocked(
                user_id=user_id,
                reason=reason,
                correlation_id=correlation_id,
            )
            raise UserRemovalError(reason)

        await self._save_users(
            [user for user in self._users if user.id != user_id],
            correlation_id,
        )
        await self._audit_logger.log_user_removed(
            user_id=user_id,
            correlation_id=correlation_id,
        )

    # -------------------------------------------------------------------------
    # Settlements
    # -------------------------------------------------------------------------

    async def record_settlement(
        self,
        from_user: str,
        to_user: str,
        amount: float,
        currency: Optional[Currency] = None,
    ) -> SettlementExpense:
        """
        Record a payment from a debtor to a creditor.

        Args:
            from_user: Debtor paying back
            to_user: Creditor receiving the payment
            amount: Amount paid; may be less than the balance
            currency: Currency ``amount`` was entered in. Base unit if None.

        Raises:
            SettlementError: If there is no such balance, or the amount is
                not positive or exceeds it
        """
        correlation_id = create_correlation_id()

        balance = next(
            (
                b for b in self.balances
                if b.from_user == from_user and b.to_user == to_user
            ),
            None,
        )
        if balance is None:
            raise SettlementError(f"{from_user} does not owe {to_user} anything")

        rate = currency.rate if currency is not None else 1.0
        amount = to_base(amount, rate)

        result = self.validator().validate_settlement(balance, amount, rate=rate)
        if result.has_errors:
            raise SettlementError(ExpenseValidator.summarize(result), result)

        # Tolerance is one cent of the currency the amount was entered in
        if abs(amount - balance.amount) <= self._settings.share_tolerance / rate:
            amount = balance.amount

        settlement = SettlementExpense(
            amount=amount,
            paid_by=from_user,
            participants=[Participant(user_id=to_user, share=amount)],
        )
        await self._save_expenses([*self._expenses, settlement], correlation_id)

        await self._audit_logger.log_settlement_recorded(
            expense_id=settlement.id,
            from_user=from_user,
            to_user=to_user,
            amount=amount,
            correlation_id=correlation_id,
        )
        return settlement

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    async def set_currency(self, code: str) -> Currency:
        """Change the display currency. Stored amounts are untouched."""
        correlation_id = create_correlation_id()
        currency = get_currency(code)

        await self._repository.save_currency_code(currency.code)
        self._currency = currency

        await self._audit_logger.log_currency_changed(
            code=currency.code,
            correlation_id=correlation_id,
        )
        return currency
