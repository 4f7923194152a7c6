"""
tabledger - Source Package

An interactive command-line ledger for keeping named "tabs" of
income and expense entries as plain text files.

DESIGN PRINCIPLES:
1. Plain text on disk, readable without this tool
2. Report errors and return to the menu, never crash
3. One bad line never hides the rest of a tab
4. Every mutating action is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "tabledger Team"
