"""
Core Data Models for tabledger

These models define the schemas for everything flowing between the
store, the formatter and the interactive shell. They are designed to:
1. Reject bad user input at the boundary with a clear message
2. Stay serializable to the plain-text line format
3. Report parse problems as data rather than exceptions

DESIGN DECISION: Transactions are immutable. A tab is append-only, so
nothing ever edits a transaction in place.
"""

import math
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


class InvalidInputError(ValueError):
    """User-supplied or stored value cannot be accepted (empty, non-numeric, unknown kind)."""
    pass


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    Direction of a transaction.

    The values are written verbatim into tab files, so they are
    case-sensitive and must never change.
    """
    INCOME = "Income"
    EXPENSE = "Expense"


# =============================================================================
# INPUT PARSING HELPERS
# =============================================================================

def parse_amount(text: str) -> float:
    """
    Parse a user-entered or stored amount.

    Accepts any decimal number that is finite and not negative.
    The sign of a transaction comes from its kind, never the amount.
    """
    if text is None or not str(text).strip():
        raise InvalidInputError("Amount is required")
    raw = str(text).strip()
    try:
        value = float(raw)
    except ValueError:
        raise InvalidInputError(f"Amount is not a number: {raw!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"Amount must be a finite number: {raw!r}")
    if value < 0:
        raise InvalidInputError(f"Amount cannot be negative: {raw!r}")
    return value


def parse_kind(token: str) -> TransactionKind:
    """Match a kind token exactly against Income / Expense."""
    try:
        return TransactionKind(token)
    except ValueError:
        allowed = ", ".join(kind.value for kind in TransactionKind)
        raise InvalidInputError(f"Unrecognized kind {token!r} (expected one of: {allowed})")


# =============================================================================
# CORE MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    One ledger line.

    Stored as "<description>: <amount> (<kind>)". The description is
    the text before the first ':' so it may not contain one itself.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    description: str = Field(
        ...,
        min_length=1,
        description="Free-text label"
    )
    amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Magnitude; direction comes from kind"
    )
    kind: TransactionKind = Field(
        ...,
        description="Income or Expense"
    )

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        if ":" in v:
            raise ValueError("Description cannot contain ':'")
        if "\n" in v or "\r" in v:
            raise ValueError("Description must be a single line")
        return v

    @property
    def is_income(self) -> bool:
        return self.kind == TransactionKind.INCOME


class Tab(BaseModel):
    """
    A named ledger backed by one text file.

    file_name is relative to the data directory unless it is absolute
    (older manifests recorded absolute paths).
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        description="Tab name as shown in menus"
    )
    file_name: str = Field(
        ...,
        min_length=1,
        description="Backing file, usually '<name>.txt'"
    )


# =============================================================================
# PARSE RESULTS
# =============================================================================

class ParseIssue(BaseModel):
    """A single line that was skipped while parsing a tab."""

    line_number: int = Field(
        ...,
        ge=1,
        description="1-based line number in the tab file"
    )
    line: str = Field(
        ...,
        description="The offending line as stored"
    )
    issue_type: str = Field(
        ...,
        pattern="^(malformed_record|invalid_input)$",
        description="Shape mismatch or bad field value"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ParseResult(BaseModel):
    """
    Result of parsing a tab's raw text.

    Good lines become transactions in file order; bad lines become issues.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    issues: list[ParseIssue] = Field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    @property
    def issue_count(self) -> int:
        return len(self.issues)


class TabSummary(BaseModel):
    """Totals over a sequence of transactions."""

    transaction_count: int = Field(default=0, ge=0)
    total_income: float = Field(default=0.0, ge=0)
    total_expense: float = Field(default=0.0, ge=0)

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense


# =============================================================================
# FLOW RESULTS
# =============================================================================

class TabView(BaseModel):
    """Everything the shell needs to display one tab."""

    tab: Tab
    transactions: list[Transaction] = Field(default_factory=list)
    issues: list[ParseIssue] = Field(default_factory=list)
    summary: TabSummary = Field(default_factory=TabSummary)
    error: Optional[str] = Field(
        default=None,
        description="Why the tab could not be read, if it could not"
    )
    error_type: Optional[str] = None


class OperationResult(BaseModel):
    """
    Outcome of one menu action.

    Every mutating action reports success or failure explicitly;
    a failed action leaves the menu loop running.
    """

    success: bool
    message: str
    tab: Optional[Tab] = None
    views: list[TabView] = Field(default_factory=list)
    error_type: Optional[str] = Field(
        default=None,
        description="Exception class name when success is False"
    )
