"""
Abstract Storage Interface

DESIGN DECISION: The ledger persists through a plain key-value store.
This allows us to:
1. Back the ledger with files, an embedded DB or browser storage
2. Use in-memory storage for testing
3. Keep the balance engine completely unaware of persistence

Values are JSON-compatible structures (dicts, lists, strings, numbers).
Turning them into models is LedgerRepository's job, not the store's.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from splitledger.models.audit import AuditEvent


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    Any backend (JSON files, SQLite, localStorage bridge, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def load(self, key: str) -> Optional[Any]:
        """
        Load the value stored under a key.

        Args:
            key: Storage key (e.g. 'users', 'expenses')

        Returns:
            The stored value, or None if nothing is stored

        Raises:
            StorageError: If the backend cannot be read
            CorruptDataError: If the stored value cannot be decoded
        """
        pass

    @abstractmethod
    async def save(self, key: str, value: Any) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if something was removed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but cannot be decoded."""
    pass
