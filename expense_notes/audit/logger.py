"""
Audit Logger

DESIGN DECISION: Every mutation of the expense store is logged.
This provides:
1. Traceability of what changed the collection
2. Debugging capability when a persist fails
3. A visible history of imports and resets

The audit logger never raises into the store: a broken log sink
must not turn a successful save into a failure.
"""

from typing import Any, Optional

import structlog

from expense_notes.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service for the expense store.

    Events go to the structured local log. Pass a list as `sink`
    to also collect the events in memory (used by tests and by
    callers that want to show recent activity).
    """

    def __init__(self, sink: Optional[list[AuditEvent]] = None):
        self._sink = sink
        self._logger = structlog.get_logger("expense_notes.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        try:
            if event.severity is AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity is AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log sink failure must not fail the store operation
            self._logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )

        if self._sink is not None:
            self._sink.append(event)

    def log_store_opened(self, record_count: int, first_run: bool) -> None:
        self.log(AuditEventBuilder.store_opened(record_count, first_run))

    def log_store_seeded(self, inserted: int) -> None:
        self.log(AuditEventBuilder.store_seeded(inserted))

    def log_store_reset(self) -> None:
        self.log(AuditEventBuilder.store_reset())

    def log_expense_created(self, expense_id: int, title: str, amount: float) -> None:
        """Log a manual insert."""
        self.log(AuditEventBuilder.expense_created(expense_id, title, amount))

    def log_expense_updated(self, expense_id: int, changes: dict[str, Any]) -> None:
        self.log(AuditEventBuilder.expense_updated(expense_id, changes))

    def log_expense_paid_toggled(self, expense_id: int, paid: int) -> None:
        self.log(AuditEventBuilder.expense_paid_toggled(expense_id, paid))

    def log_expense_deleted(self, expense_id: int) -> None:
        self.log(AuditEventBuilder.expense_deleted(expense_id))

    def log_expenses_imported(self, received: int, inserted: int) -> None:
        """Log an import batch, including how many items were duplicates."""
        self.log(AuditEventBuilder.expenses_imported(received, inserted))

    def log_import_rejected(self, error_message: str) -> None:
        self.log(AuditEventBuilder.import_rejected(error_message))

    def log_storage_error(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_error(operation, error_message))
