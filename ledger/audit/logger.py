"""
Audit Logger

DESIGN DECISION: Every significant action in the ledger is logged.
This provides:
1. Complete traceability of committed and refused operations
2. Debugging capability when a user asks "why was this rejected?"
3. A history independent of the current snapshot

The audit logger:
- Always logs locally through structlog
- Optionally appends events to an audit storage backend
- Gracefully handles storage failures (an audit write never breaks a mutation)
"""

import logging
from typing import Optional

import structlog

from ledger.config import get_settings
from ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from ledger.services.storage import AuditStorageInterface


_log_settings = get_settings().logging

logging.basicConfig(format="%(message)s", level=_log_settings.level)

# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if _log_settings.json_output
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("ledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_profile_created(self, profile_id: str, name: str, currency: str) -> None:
        self.log(AuditEventBuilder.profile_created(profile_id, name, currency))

    def log_profile_selected(self, profile_id: str) -> None:
        self.log(AuditEventBuilder.profile_selected(profile_id))

    def log_profile_deleted(self, profile_id: str, transaction_count: int) -> None:
        self.log(AuditEventBuilder.profile_deleted(profile_id, transaction_count))

    def log_operation_committed(
        self,
        profile_id: str,
        operation: str,
        transactions_before: int,
        transactions_after: int,
    ) -> None:
        """Log a mutation that replaced the profile snapshot."""
        self.log(AuditEventBuilder.operation_committed(
            profile_id=profile_id,
            operation=operation,
            transactions_before=transactions_before,
            transactions_after=transactions_after,
        ))

    def log_operation_rejected(
        self,
        profile_id: Optional[str],
        operation: str,
        error_code: str,
        error_message: str,
    ) -> None:
        """Log a mutation the engine refused."""
        self.log(AuditEventBuilder.operation_rejected(
            profile_id=profile_id,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
        ))

    def log_snapshot_loaded(self, profile_count: int) -> None:
        self.log(AuditEventBuilder.snapshot_loaded(profile_count))

    def log_snapshot_saved(self, profile_count: int) -> None:
        self.log(AuditEventBuilder.snapshot_saved(profile_count))

    def log_save_failed(self, profile_id: Optional[str], error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(profile_id, error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
