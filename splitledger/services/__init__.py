"""Services package."""

from splitledger.services.storage import (
    AuditStorageInterface,
    CorruptDataError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValueStoreInterface,
    LedgerRepository,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "CorruptDataError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueAuditStorage",
    "KeyValueStoreInterface",
    "LedgerRepository",
    "StorageError",
]
