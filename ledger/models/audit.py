"""
Audit Models for the Ledger

Every mutation of a profile is logged for audit purposes.
This provides:
1. Traceability of who-changed-what on a ledger with no undo
2. Debugging information when an operation is refused
3. A history that survives the snapshot being replaced

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Profile lifecycle
    PROFILE_CREATED = "profile_created"
    PROFILE_SELECTED = "profile_selected"
    PROFILE_DELETED = "profile_deleted"

    # Ledger mutations
    OPERATION_COMMITTED = "operation_committed"
    OPERATION_REJECTED = "operation_rejected"

    # Persistence
    SNAPSHOT_LOADED = "snapshot_loaded"
    SNAPSHOT_SAVED = "snapshot_saved"
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which profile is this about?
    profile_id: Optional[str] = Field(
        default=None,
        description="Profile the event relates to"
    )
    operation: Optional[str] = Field(
        default=None,
        description="Engine operation name, for mutation events"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "profile_id": self.profile_id,
            "operation": self.operation,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.profile_created(profile_id, name)
        event = AuditEventBuilder.operation_rejected(profile_id, "add_transfer", code, msg)
    """

    @staticmethod
    def profile_created(profile_id: str, name: str, currency: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_CREATED,
            profile_id=profile_id,
            description=f"Profile created: {name}",
            details={"name": name, "currency": currency},
        )

    @staticmethod
    def profile_selected(profile_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_SELECTED,
            severity=AuditSeverity.DEBUG,
            profile_id=profile_id,
            description="Active profile changed",
        )

    @staticmethod
    def profile_deleted(profile_id: str, transaction_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_DELETED,
            severity=AuditSeverity.WARNING,
            profile_id=profile_id,
            description=f"Profile deleted with {transaction_count} transactions",
            details={"transaction_count": transaction_count},
        )

    @staticmethod
    def operation_committed(
        profile_id: str,
        operation: str,
        transactions_before: int,
        transactions_after: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_COMMITTED,
            profile_id=profile_id,
            operation=operation,
            description=f"Operation committed: {operation}",
            details={
                "transactions_before": transactions_before,
                "transactions_after": transactions_after,
            },
        )

    @staticmethod
    def operation_rejected(
        profile_id: Optional[str],
        operation: str,
        error_code: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            profile_id=profile_id,
            operation=operation,
            description=f"Operation rejected: {operation}",
            error_code=error_code,
            error_message=error_message,
        )

    @staticmethod
    def snapshot_loaded(profile_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOADED,
            description=f"Loaded {profile_count} profiles",
            details={"profile_count": profile_count},
        )

    @staticmethod
    def snapshot_saved(profile_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVED,
            severity=AuditSeverity.DEBUG,
            description=f"Saved {profile_count} profiles",
            details={"profile_count": profile_count},
        )

    @staticmethod
    def save_failed(profile_id: Optional[str], error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            profile_id=profile_id,
            description="Snapshot could not be persisted; change rolled back",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
