"""Services package."""

from ledger.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryProfileStorage,
    JsonFileProfileStorage,
    ProfileStorageInterface,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryProfileStorage",
    "JsonFileProfileStorage",
    "ProfileStorageInterface",
    "StorageConnectionError",
    "StorageError",
]
