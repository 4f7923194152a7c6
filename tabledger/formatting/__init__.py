"""Ledger line format and table rendering package."""

from tabledger.formatting.formatter import (
    EXPENSE_STYLE,
    INCOME_STYLE,
    LedgerFormatter,
    LineShapeError,
)

__all__ = ["EXPENSE_STYLE", "INCOME_STYLE", "LedgerFormatter", "LineShapeError"]
