"""
Audit Models for tabledger

Every mutating action on a tab is logged for audit purposes.
This provides:
1. A history of what happened to each tab
2. Debugging information when a file write goes wrong
3. Ability to reconstruct which entries were appended when

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
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
    # Tab lifecycle
    TAB_CREATED = "tab_created"
    TAB_DELETED = "tab_deleted"

    # Content
    TRANSACTIONS_APPENDED = "transactions_appended"
    TAB_DISPLAYED = "tab_displayed"
    PARSE_ISSUES_FOUND = "parse_issues_found"

    # Failures
    OPERATION_FAILED = "operation_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Which tab is this about?
    tab_name: Optional[str] = Field(
        default=None,
        description="Name of the tab this event relates to"
    )

    # Correlation - all events of one menu action share this
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

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
    error_type: Optional[str] = None
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
            "tab_name": self.tab_name,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.tab_created("Groceries", "Groceries.txt", correlation_id)
        event = AuditEventBuilder.operation_failed("delete", exc, correlation_id)
    """

    @staticmethod
    def tab_created(
        tab_name: str,
        file_name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAB_CREATED,
            tab_name=tab_name,
            correlation_id=correlation_id,
            description=f"Tab created: {tab_name}",
            details={"file_name": file_name},
        )

    @staticmethod
    def tab_deleted(
        tab_name: str,
        file_name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAB_DELETED,
            tab_name=tab_name,
            correlation_id=correlation_id,
            description=f"Tab deleted: {tab_name}",
            details={"file_name": file_name},
        )

    @staticmethod
    def transactions_appended(
        tab_name: str,
        count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_APPENDED,
            tab_name=tab_name,
            correlation_id=correlation_id,
            description=f"Appended {count} transaction(s) to {tab_name}",
            details={"count": count},
        )

    @staticmethod
    def tab_displayed(
        tab_name: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAB_DISPLAYED,
            severity=AuditSeverity.DEBUG,
            tab_name=tab_name,
            correlation_id=correlation_id,
            description=f"Displayed {tab_name} with {transaction_count} transaction(s)",
            details={"transaction_count": transaction_count},
        )

    @staticmethod
    def parse_issues_found(
        tab_name: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARSE_ISSUES_FOUND,
            severity=AuditSeverity.WARNING,
            tab_name=tab_name,
            correlation_id=correlation_id,
            description=f"Skipped {len(issues)} unreadable line(s) in {tab_name}",
            details={"issues": issues},
        )

    @staticmethod
    def operation_failed(
        operation: str,
        error: Exception,
        tab_name: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_FAILED,
            severity=AuditSeverity.ERROR,
            tab_name=tab_name,
            correlation_id=correlation_id,
            description=f"Operation failed: {operation}",
            details={"operation": operation},
            error_type=type(error).__name__,
            error_message=str(error),
        )
