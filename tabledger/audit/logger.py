"""
Audit Logger

DESIGN DECISION: Every mutating action on a tab is logged.
This provides:
1. Traceability of what was created, appended and deleted
2. Debugging capability when a file write fails
3. A record of unreadable lines found in tabs

The audit logger:
- Writes structured JSON lines through stdlib logging
- Leaves handler errors to stdlib logging, so a menu action never fails on logging
- Supports correlation IDs to trace the events of one menu action
"""

import logging
from pathlib import Path
from typing import Optional
from uuid import UUID, uuid4

import structlog

from tabledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(
    log_path: Optional[Path] = None,
    level: str = "INFO",
) -> None:
    """
    Route log output to a file so the interactive console stays clean.

    With no log_path, records go to stderr.
    """
    handler: logging.Handler
    if log_path is not None:
        handler = logging.FileHandler(log_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)
    root.setLevel(level)


class AuditLogger:
    """
    Central audit logging service.

    Logs typed AuditEvents to the structured local log.
    """

    def __init__(self, logger_name: str = "tabledger.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """
        Log an audit event at its severity.

        Handler write errors are reported by stdlib logging itself
        and never reach the caller.
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_tab_created(
        self,
        tab_name: str,
        file_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log tab creation."""
        self.log(AuditEventBuilder.tab_created(
            tab_name=tab_name,
            file_name=file_name,
            correlation_id=correlation_id,
        ))

    def log_tab_deleted(
        self,
        tab_name: str,
        file_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log tab deletion."""
        self.log(AuditEventBuilder.tab_deleted(
            tab_name=tab_name,
            file_name=file_name,
            correlation_id=correlation_id,
        ))

    def log_transactions_appended(
        self,
        tab_name: str,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an append."""
        self.log(AuditEventBuilder.transactions_appended(
            tab_name=tab_name,
            count=count,
            correlation_id=correlation_id,
        ))

    def log_tab_displayed(
        self,
        tab_name: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.tab_displayed(
            tab_name=tab_name,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        ))

    def log_parse_issues(
        self,
        tab_name: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log lines skipped while parsing a tab."""
        self.log(AuditEventBuilder.parse_issues_found(
            tab_name=tab_name,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_operation_failed(
        self,
        operation: str,
        error: Exception,
        tab_name: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed menu action."""
        self.log(AuditEventBuilder.operation_failed(
            operation=operation,
            error=error,
            tab_name=tab_name,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a menu action and pass it through
    all subsequent operations.
    """
    return uuid4()
