"""
Profile Store for the Ledger

This module ties the pure engine to persistence and auditing. It owns
the single current LedgerSnapshot and is the only place that replaces it.

Flow of every mutation:
1. Read   → take the active profile's data
2. Apply  → run a pure engine operation, producing a candidate
3. Commit → swap the candidate into a new snapshot
4. Persist → save the new snapshot; on failure restore the old one
5. Audit  → log what was committed or why it was refused

DESIGN DECISION: The store enforces the boundaries:
- An operation either fully replaces the snapshot or leaves it untouched
- Engine refusals are results, not exceptions, for the caller
- Every step is audited

There is no locking; the ledger is single-session and synchronous.
"""

import datetime as dt
from collections.abc import Callable
from decimal import Decimal
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError

from ledger import engine
from ledger.audit import AuditLogger
from ledger.errors import EntityNotFoundError, LedgerError
from ledger.models.ledger import LedgerSnapshot, Profile, ProfileData
from ledger.models.reports import LedgerOverview, OperationResult
from ledger.queries import build_overview
from ledger.services.storage import (
    InMemoryProfileStorage,
    JsonFileProfileStorage,
    ProfileStorageInterface,
    StorageError,
)
from ledger.validation import compute_balances, invalid_input_from


logger = structlog.get_logger(__name__)

Operation = Callable[..., ProfileData]

# Engine operations addressable by name through LedgerStore.apply
OPERATIONS: dict[str, Operation] = {
    name: getattr(engine, name)
    for name in engine.__all__
    if name not in {"PaymentEntry", "create_profile", "deletion_confirmation_message"}
}


class NoActiveProfileError(LedgerError):
    """A profile operation was requested while no profile is selected."""

    code = "no_active_profile"


class LedgerStore:
    """
    Holds the current snapshot and applies engine operations to it.

    Usage:
        store = create_store()
        profile = store.create_profile("Casa", "ES", "EUR")
        result = store.apply("add_transaction", description="Salary", ...)
    """

    def __init__(
        self,
        storage: Optional[ProfileStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage or InMemoryProfileStorage()
        self._audit_logger = audit_logger or AuditLogger()
        self._snapshot = self._storage.load()
        self._audit_logger.log_snapshot_loaded(len(self._snapshot.profiles))

    # =========================================================================
    # SNAPSHOT ACCESS
    # =========================================================================

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._snapshot

    @property
    def profiles(self) -> list[Profile]:
        return list(self._snapshot.profiles)

    @property
    def active_profile(self) -> Optional[Profile]:
        if self._snapshot.active_profile_id is None:
            return None
        return self._snapshot.get_profile(self._snapshot.active_profile_id)

    @property
    def data(self) -> ProfileData:
        """Data of the active profile."""
        return self._require_active().data

    def _require_active(self) -> Profile:
        profile = self.active_profile
        if profile is None:
            raise NoActiveProfileError("No profile is selected")
        return profile

    def _install(self, snapshot: LedgerSnapshot) -> None:
        """Swap in `snapshot` and persist it; restore the old one if saving fails."""
        previous = self._snapshot
        self._snapshot = snapshot
        try:
            self._storage.save(snapshot)
        except StorageError:
            self._snapshot = previous
            raise
        self._audit_logger.log_snapshot_saved(len(snapshot.profiles))

    # =========================================================================
    # PROFILE LIFECYCLE
    # =========================================================================

    def create_profile(self, name: str, country_code: str, currency: str) -> Profile:
        """
        Create a profile with the default categories and make it active.

        Raises:
            InvalidInputError: Missing name, country or bad currency code.
            StorageError: The new snapshot could not be saved.
        """
        try:
            profile = engine.create_profile(name, country_code, currency)
        except ValidationError as e:
            raise invalid_input_from(e) from e
        self._install(self._snapshot.model_copy(update={
            "profiles": [*self._snapshot.profiles, profile],
            "active_profile_id": profile.id,
        }))
        self._audit_logger.log_profile_created(profile.id, profile.name, profile.currency)
        return profile

    def select_profile(self, profile_id: str) -> Profile:
        profile = self._snapshot.get_profile(profile_id)
        if profile is None:
            raise EntityNotFoundError("Profile", profile_id)
        self._install(self._snapshot.model_copy(update={"active_profile_id": profile_id}))
        self._audit_logger.log_profile_selected(profile_id)
        return profile

    def delete_profile(self, profile_id: str) -> None:
        """
        Delete a profile and all of its data.

        If it was active, the first remaining profile becomes active.
        """
        profile = self._snapshot.get_profile(profile_id)
        if profile is None:
            raise EntityNotFoundError("Profile", profile_id)

        remaining = [p for p in self._snapshot.profiles if p.id != profile_id]
        active_id = self._snapshot.active_profile_id
        if active_id == profile_id:
            active_id = remaining[0].id if remaining else None

        self._install(self._snapshot.model_copy(update={
            "profiles": remaining,
            "active_profile_id": active_id,
        }))
        self._audit_logger.log_profile_deleted(profile_id, len(profile.data.transactions))

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def apply(self, operation: Union[str, Operation], *args: Any, **kwargs: Any) -> OperationResult:
        """
        Run an engine operation against the active profile.

        Args:
            operation: Engine function, or its name (e.g. "add_transfer").
            *args, **kwargs: Parameters after the profile data.

        Returns:
            OperationResult. On failure `data` is the unchanged snapshot.
        """
        if isinstance(operation, str):
            name = operation
            func = OPERATIONS.get(operation)
            if func is None:
                raise ValueError(f"Unknown ledger operation: {operation}")
        else:
            func = operation
            name = getattr(operation, "__name__", repr(operation))

        profile = self.active_profile
        if profile is None:
            error = NoActiveProfileError("No profile is selected")
            self._audit_logger.log_operation_rejected(None, name, error.code, error.message)
            return OperationResult(
                operation=name,
                success=False,
                error_code=error.code,
                error_message=error.message,
            )

        before = profile.data
        try:
            after = func(before, *args, **kwargs)
        except ValidationError as e:
            return self._reject(profile.id, name, invalid_input_from(e), before)
        except LedgerError as e:
            return self._reject(profile.id, name, e, before)
        except Exception as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"profile_id": profile.id, "operation": name},
            )
            raise

        updated = profile.model_copy(update={"data": after})
        profiles = [updated if p.id == profile.id else p for p in self._snapshot.profiles]
        try:
            self._install(self._snapshot.model_copy(update={"profiles": profiles}))
        except StorageError as e:
            logger.error("snapshot_save_failed", operation=name, error=str(e))
            self._audit_logger.log_save_failed(profile.id, str(e))
            return OperationResult(
                operation=name,
                success=False,
                error_code="storage_error",
                error_message=f"The change could not be saved: {e}",
                data=before,
            )

        self._audit_logger.log_operation_committed(
            profile_id=profile.id,
            operation=name,
            transactions_before=len(before.transactions),
            transactions_after=len(after.transactions),
        )
        return OperationResult(operation=name, success=True, data=after)

    def _reject(
        self,
        profile_id: str,
        operation: str,
        error: LedgerError,
        data: ProfileData,
    ) -> OperationResult:
        self._audit_logger.log_operation_rejected(profile_id, operation, error.code, error.message)
        return OperationResult(
            operation=operation,
            success=False,
            error_code=error.code,
            error_message=error.message,
            data=data,
        )

    # =========================================================================
    # READ MODELS
    # =========================================================================

    def balances(self) -> dict[str, Decimal]:
        data = self.data
        return compute_balances(data.transactions, data.bank_accounts)

    def overview(self, today: Optional[dt.date] = None) -> LedgerOverview:
        return build_overview(self.data, today)

    def deletion_confirmation_message(self, transaction_id: str) -> str:
        return engine.deletion_confirmation_message(self.data, transaction_id)


def create_store(use_storage: bool = True) -> LedgerStore:
    """
    Factory function to create a ready-to-use store.

    Args:
        use_storage: Whether to persist to the configured JSON file.
                    Set to False for testing without storage.

    Returns:
        LedgerStore with the active profile (if any) loaded.
    """
    if use_storage:
        storage: ProfileStorageInterface = JsonFileProfileStorage()
    else:
        storage = InMemoryProfileStorage()
    return LedgerStore(storage=storage, audit_logger=AuditLogger())
