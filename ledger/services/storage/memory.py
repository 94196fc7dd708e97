"""
In-Memory Storage

Used by tests and by stores created without persistence.
"""

from typing import Optional

from ledger.models.audit import AuditEvent
from ledger.models.ledger import LedgerSnapshot
from ledger.services.storage.interface import (
    AuditStorageInterface,
    ProfileStorageInterface,
    StorageConnectionError,
)


class InMemoryProfileStorage(ProfileStorageInterface):
    """
    Keeps the last saved snapshot in memory.

    Set `fail_saves` to simulate an unavailable backend.
    """

    def __init__(self, snapshot: Optional[LedgerSnapshot] = None):
        self._snapshot = snapshot or LedgerSnapshot()
        self.save_count = 0
        self.fail_saves = False

    def load(self) -> LedgerSnapshot:
        return self._snapshot

    def save(self, snapshot: LedgerSnapshot) -> bool:
        if self.fail_saves:
            raise StorageConnectionError("In-memory storage is unavailable")
        self._snapshot = snapshot
        self.save_count += 1
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_for_profile(self, profile_id: str) -> list[AuditEvent]:
        return [e for e in self._events if e.profile_id == profile_id]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
