"""
Storage Services Package

Provides abstract interfaces and concrete implementations for snapshot
storage. The JSON file is the default backend; memory storage backs tests.
"""

from ledger.services.storage.interface import (
    AuditStorageInterface,
    ProfileStorageInterface,
    StorageConnectionError,
    StorageError,
)
from ledger.services.storage.json_file import JsonFileProfileStorage
from ledger.services.storage.memory import InMemoryAuditStorage, InMemoryProfileStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ProfileStorageInterface",
    # Exceptions
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryProfileStorage",
    "JsonFileProfileStorage",
]
