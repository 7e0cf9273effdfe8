"""
Audit Models for Expense Notes

Every mutation of the expense store is recorded as an audit event.
This provides:
1. Traceability of what changed the collection and when
2. Debugging information when a persist fails
3. A record of imports (how many items arrived, how many were kept)

DESIGN DECISION: Audit events are emitted, never edited.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Lifecycle
    STORE_OPENED = "store_opened"
    STORE_SEEDED = "store_seeded"
    STORE_RESET = "store_reset"

    # Mutations
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_PAID_TOGGLED = "expense_paid_toggled"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSES_IMPORTED = "expenses_imported"

    # Failures
    IMPORT_REJECTED = "import_rejected"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every store mutation creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    expense_id: Optional[int] = Field(
        default=None,
        description="ID of the expense this event relates to"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
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
            "expense_id": self.expense_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_created(expense_id, title, amount)
        event = AuditEventBuilder.expenses_imported(received=30, inserted=28)
    """

    @staticmethod
    def store_opened(record_count: int, first_run: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_OPENED,
            description=f"Store opened with {record_count} expenses",
            details={
                "record_count": record_count,
                "first_run": first_run,
            },
        )

    @staticmethod
    def store_seeded(inserted: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_SEEDED,
            description=f"Seeded {inserted} sample expenses",
            details={"inserted": inserted},
        )

    @staticmethod
    def store_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_RESET,
            severity=AuditSeverity.WARNING,
            description="Store reset: all expenses and the initialized marker removed",
        )

    @staticmethod
    def expense_created(expense_id: int, title: str, amount: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            expense_id=expense_id,
            description=f"Expense created: {title}",
            details={"title": title, "amount": amount},
        )

    @staticmethod
    def expense_updated(expense_id: int, changes: dict[str, Any]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            expense_id=expense_id,
            description=f"Expense {expense_id} updated",
            details={"changes": changes},
        )

    @staticmethod
    def expense_paid_toggled(expense_id: int, paid: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_PAID_TOGGLED,
            expense_id=expense_id,
            description=f"Expense {expense_id} marked {'paid' if paid else 'unpaid'}",
            details={"paid": paid},
        )

    @staticmethod
    def expense_deleted(expense_id: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            expense_id=expense_id,
            description=f"Expense {expense_id} deleted",
        )

    @staticmethod
    def expenses_imported(received: int, inserted: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_IMPORTED,
            description=f"Imported {inserted} of {received} items",
            details={
                "received": received,
                "inserted": inserted,
                "skipped_duplicates": received - inserted,
            },
        )

    @staticmethod
    def import_rejected(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            description="Import payload rejected",
            error_message=error_message,
        )

    @staticmethod
    def storage_error(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage failure during {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
