"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the engine free of any I/O
2. Use in-memory storage for testing
3. Swap the JSON file for another key-value backend later

The unit of persistence is the whole LedgerSnapshot. The engine replaces
snapshots wholesale, so storage does too; there is no per-entity API.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ledger.models.audit import AuditEvent
from ledger.models.ledger import LedgerSnapshot


class ProfileStorageInterface(ABC):
    """
    Abstract interface for profile snapshot storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> LedgerSnapshot:
        """
        Load the persisted snapshot.

        Returns:
            The stored snapshot, or an empty one if nothing was saved yet.

        Raises:
            StorageError: If the stored data cannot be read or parsed
        """
        pass

    @abstractmethod
    def save(self, snapshot: LedgerSnapshot) -> bool:
        """
        Replace the persisted snapshot.

        Args:
            snapshot: The full snapshot to store

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_for_profile(self, profile_id: str) -> list[AuditEvent]:
        """
        Get all events for a profile, in chronological order.
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class StorageConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
