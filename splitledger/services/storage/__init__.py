"""
Storage Services Package

Provides the key-value storage interface the ledger persists through,
plus in-memory and JSON-file implementations.
"""

from splitledger.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    KeyValueStoreInterface,
    StorageError,
)
from splitledger.services.storage.audit_store import KeyValueAuditStorage
from splitledger.services.storage.json_file import JsonFileKeyValueStore
from splitledger.services.storage.memory import InMemoryKeyValueStore
from splitledger.services.storage.repository import LedgerRepository

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStoreInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueAuditStorage",
    "LedgerRepository",
]
