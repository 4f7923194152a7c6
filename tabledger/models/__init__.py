"""
Data Models Package

This package contains all Pydantic models used in tabledger.
All data flowing through the system must conform to these schemas.
"""

from tabledger.models.ledger import (
    InvalidInputError,
    OperationResult,
    ParseIssue,
    ParseResult,
    Tab,
    TabSummary,
    TabView,
    Transaction,
    TransactionKind,
    parse_amount,
    parse_kind,
)
from tabledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "InvalidInputError",
    "OperationResult",
    "ParseIssue",
    "ParseResult",
    "Tab",
    "TabSummary",
    "TabView",
    "Transaction",
    "TransactionKind",
    "parse_amount",
    "parse_kind",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
