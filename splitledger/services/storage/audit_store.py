"""Audit log kept as an append-only list under one key of a key-value store."""

from pydantic import TypeAdapter

from splitledger.models.audit import AuditEvent
from splitledger.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStoreInterface,
)


AUDIT_KEY = "audit"

_events_adapter = TypeAdapter(list[AuditEvent])


class KeyValueAuditStorage(AuditStorageInterface):

    def __init__(self, store: KeyValueStoreInterface, key: str = AUDIT_KEY):
        self._store = store
        self._key = key

    async def append_event(self, event: AuditEvent) -> bool:
        records = await self._store.load(self._key) or []
        records.append(event.model_dump(mode="json"))
        await self._store.save(self._key, records)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        records = await self._store.load(self._key) or []
        events = _events_adapter.validate_python(records)
        return list(reversed(events))[:limit]
