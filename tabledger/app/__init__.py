"""Interactive terminal frontend package."""

from tabledger.app.main import LedgerShell, main

__all__ = ["LedgerShell", "main"]
