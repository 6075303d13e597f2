"""
Ledger Repository

Maps the ledger's models to and from the JSON structures kept in a
KeyValueStoreInterface. Records are written with the camelCase field
names of the stored format (``paidBy``, ``userId``) and validated on the
way back in, so a hand-edited or truncated file fails loudly instead of
producing wrong balances.
"""

from typing import Optional

from pydantic import TypeAdapter, ValidationError

from splitledger.models.ledger import Expense, User
from splitledger.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
)


USERS_KEY = "users"
EXPENSES_KEY = "expenses"
CURRENCY_KEY = "currency"

_users_adapter = TypeAdapter(list[User])
_expenses_adapter = TypeAdapter(list[Expense])


class LedgerRepository:
    """Loads and saves users, expenses and the display currency."""

    def __init__(self, store: KeyValueStoreInterface):
        self._store = store

    @property
    def store(self) -> KeyValueStoreInterface:
        return self._store

    async def load_users(self) -> Optional[list[User]]:
        """Return stored users, or None if none were ever saved."""
        raw = await self._store.load(USERS_KEY)
        if raw is None:
            return None
        try:
            return _users_adapter.validate_python(raw)
        except ValidationError as e:
            raise CorruptDataError(f"Stored users are invalid: {e}") from e

    async def save_users(self, users: list[User]) -> None:
        await self._store.save(
            USERS_KEY,
            _users_adapter.dump_python(users, mode="json", by_alias=True),
        )

    async def load_expenses(self) -> list[Expense]:
        raw = await self._store.load(EXPENSES_KEY)
        if raw is None:
            return []
        try:
            return _expenses_adapter.validate_python(raw)
        except ValidationError as e:
            raise CorruptDataError(f"Stored expenses are invalid: {e}") from e

    async def save_expenses(self, expenses: list[Expense]) -> None:
        await self._store.save(
            EXPENSES_KEY,
            _expenses_adapter.dump_python(expenses, mode="json", by_alias=True),
        )

    async def load_currency_code(self) -> Optional[str]:
        raw = await self._store.load(CURRENCY_KEY)
        if raw is None:
            return None
        if not isinstance(raw, str):
            raise CorruptDataError(f"Stored currency must be a code string, got {raw!r}")
        return raw

    async def save_currency_code(self, code: str) -> None:
        await self._store.save(CURRENCY_KEY, code)
