"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for tab storage.
This allows us to:
1. Keep the plain-text directory layout as one implementation among others
2. Use in-memory storage for testing
3. Keep menu flows decoupled from files and paths

The interface is intentionally small. Just the operations the menu needs.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from tabledger.models.ledger import Tab, Transaction


class TabStorageInterface(ABC):
    """
    Abstract interface for tab storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def list_tabs(self) -> list[Tab]:
        """
        List all registered tabs in manifest order.

        Returns:
            The tabs, or an empty list if nothing has been created yet.
            A missing manifest is not an error.
        """
        pass

    @abstractmethod
    def find_tab_by_name(self, name: str) -> Optional[Tab]:
        """
        Look up a tab by name.

        Returns:
            The first tab with that name in manifest order, None if absent
        """
        pass

    @abstractmethod
    def create_tab(self, name: str) -> Tab:
        """
        Register a new, empty tab.

        Args:
            name: User-supplied tab name

        Returns:
            The created tab

        Raises:
            InvalidInputError: If the name is empty or unusable as a file name
            DuplicateError: If the tab already exists
            IOFailureError: If the tab cannot be written
        """
        pass

    @abstractmethod
    def append_transactions(self, tab: Tab, transactions: Sequence[Transaction]) -> int:
        """
        Append transactions to the end of a tab.

        Args:
            tab: Target tab
            transactions: Entries in the order they should be stored

        Returns:
            Number of transactions written (0 for an empty sequence)

        Raises:
            NotFoundError: If the tab's file is missing
            IOFailureError: If the write fails
        """
        pass

    @abstractmethod
    def delete_tab(self, tab: Tab) -> bool:
        """
        Remove a tab's file and its manifest entry.

        Returns:
            True if the backing file existed and was removed,
            False if only the manifest entry was left to clean up

        Raises:
            IOFailureError: If the file or manifest cannot be updated
        """
        pass

    @abstractmethod
    def read_tab(self, tab: Tab) -> str:
        """
        Read a tab's raw contents.

        Raises:
            NotFoundError: If the tab's file is missing
            IOFailureError: If the file cannot be read
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Tab or its backing file not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to create a tab that already exists."""
    pass


class IOFailureError(StorageError):
    """A write, unlink or mkdir failed."""
    pass
