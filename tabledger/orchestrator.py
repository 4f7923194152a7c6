"""
Main Orchestrator for tabledger

This module ties the store, the formatter and the audit logger together
and defines one flow per menu action:
1. Create tab (name -> empty file + manifest entry -> optional first entries)
2. Append to tab
3. Display one tab or all tabs
4. Delete tab

DESIGN DECISION: Flows never raise for expected failures. Storage and
input errors are audited and returned as OperationResult(success=False)
so the menu loop can report them and carry on. Unexpected exceptions
still propagate.
"""

from typing import Optional, Sequence
from uuid import UUID

from pydantic import ValidationError

from tabledger.audit import AuditLogger, create_correlation_id
from tabledger.config import LedgerSettings, get_settings
from tabledger.formatting import LedgerFormatter
from tabledger.models.ledger import (
    InvalidInputError,
    OperationResult,
    Tab,
    TabView,
    Transaction,
    parse_amount,
    parse_kind,
)
from tabledger.services.storage import (
    FileTabStore,
    NotFoundError,
    StorageError,
    TabStorageInterface,
)


def _entries(count: int) -> str:
    return f"{count} entry" if count == 1 else f"{count} entries"


class TabFlow:
    """
    Orchestrates every menu action against a tab store.

    Each public method is one user action. Mutating actions always
    come back with an explicit success or failure.
    """

    def __init__(
        self,
        store: TabStorageInterface,
        formatter: Optional[LedgerFormatter] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._formatter = formatter or LedgerFormatter()
        self._audit_logger = audit_logger

    @property
    def formatter(self) -> LedgerFormatter:
        return self._formatter

    def _fail(
        self,
        operation: str,
        error: Exception,
        tab_name: Optional[str],
        correlation_id: UUID,
    ) -> OperationResult:
        if self._audit_logger:
            self._audit_logger.log_operation_failed(
                operation=operation,
                error=error,
                tab_name=tab_name,
                correlation_id=correlation_id,
            )
        return OperationResult(
            success=False,
            message=str(error),
            error_type=type(error).__name__,
        )

    def _require_tab(self, tab_name: str) -> Tab:
        tab = self._store.find_tab_by_name(tab_name)
        if tab is None:
            raise NotFoundError(f"No tab named '{tab_name}'")
        return tab

    @staticmethod
    def build_transaction(description: str, amount: str, kind: str) -> Transaction:
        """
        Build a transaction from raw prompt answers.

        Raises:
            InvalidInputError: empty description/amount, non-numeric
                amount, unknown kind, or a description containing ':'
        """
        if description is None or not description.strip():
            raise InvalidInputError("Description is required")
        try:
            return Transaction(
                description=description,
                amount=parse_amount(amount),
                kind=parse_kind(kind),
            )
        except ValidationError as e:
            messages = "; ".join(error["msg"] for error in e.errors())
            raise InvalidInputError(messages)

    def list_tabs(self) -> tuple[list[Tab], Optional[str]]:
        """
        List registered tabs.

        Returns:
            (tabs, error_message). error_message is None on success.
        """
        try:
            return self._store.list_tabs(), None
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_operation_failed(
                    operation="list_tabs",
                    error=e,
                    correlation_id=create_correlation_id(),
                )
            return [], str(e)

    def create_tab(
        self,
        name: str,
        transactions: Sequence[Transaction] = (),
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """
        Create a tab and optionally store its first entries.

        If the tab is created but the entries cannot be written, the
        result is a failure that still carries the new tab.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            tab = self._store.create_tab(name)
        except (StorageError, InvalidInputError) as e:
            return self._fail("create_tab", e, name, correlation_id)

        if self._audit_logger:
            self._audit_logger.log_tab_created(
                tab_name=tab.name,
                file_name=tab.file_name,
                correlation_id=correlation_id,
            )

        if not transactions:
            return OperationResult(
                success=True,
                message=f"Tab {tab.name} created",
                tab=tab,
            )

        result = self.append_to_tab(tab.name, transactions, correlation_id)
        if not result.success:
            return OperationResult(
                success=False,
                message=f"Tab {tab.name} created, but entries were not saved: {result.message}",
                tab=tab,
                error_type=result.error_type,
            )
        return OperationResult(
            success=True,
            message=f"Tab {tab.name} created with {_entries(len(transactions))}",
            tab=tab,
        )

    def append_to_tab(
        self,
        tab_name: str,
        transactions: Sequence[Transaction],
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Append entries to an existing tab."""
        correlation_id = correlation_id or create_correlation_id()

        try:
            tab = self._require_tab(tab_name)
            count = self._store.append_transactions(tab, transactions)
        except StorageError as e:
            return self._fail("append_to_tab", e, tab_name, correlation_id)

        if count == 0:
            return OperationResult(
                success=True,
                message=f"Nothing to add to {tab.name}",
                tab=tab,
            )

        if self._audit_logger:
            self._audit_logger.log_transactions_appended(
                tab_name=tab.name,
                count=count,
                correlation_id=correlation_id,
            )
        return OperationResult(
            success=True,
            message=f"Added {_entries(count)} to {tab.name}",
            tab=tab,
        )

    def _view(self, tab: Tab, correlation_id: UUID) -> TabView:
        """Read and parse one tab; read failures land in TabView.error."""
        try:
            content = self._store.read_tab(tab)
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_operation_failed(
                    operation="read_tab",
                    error=e,
                    tab_name=tab.name,
                    correlation_id=correlation_id,
                )
            return TabView(tab=tab, error=str(e), error_type=type(e).__name__)

        parsed = self._formatter.parse(content)

        if self._audit_logger:
            if parsed.has_issues:
                self._audit_logger.log_parse_issues(
                    tab_name=tab.name,
                    issues=[
                        {"line_number": i.line_number, "type": i.issue_type, "message": i.message}
                        for i in parsed.issues
                    ],
                    correlation_id=correlation_id,
                )
            self._audit_logger.log_tab_displayed(
                tab_name=tab.name,
                transaction_count=len(parsed.transactions),
                correlation_id=correlation_id,
            )

        return TabView(
            tab=tab,
            transactions=parsed.transactions,
            issues=parsed.issues,
            summary=self._formatter.summarize(parsed.transactions),
        )

    def view_tab(
        self,
        tab_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Load one tab for display."""
        correlation_id = correlation_id or create_correlation_id()

        try:
            tab = self._require_tab(tab_name)
        except StorageError as e:
            return self._fail("view_tab", e, tab_name, correlation_id)

        view = self._view(tab, correlation_id)
        if view.error is not None:
            return OperationResult(
                success=False,
                message=view.error,
                tab=tab,
                views=[view],
                error_type=view.error_type,
            )
        return OperationResult(success=True, message=tab.name, tab=tab, views=[view])

    def view_all_tabs(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """
        Load every registered tab for display.

        A tab that cannot be read does not stop the others.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            tabs = self._store.list_tabs()
        except StorageError as e:
            return self._fail("view_all_tabs", e, None, correlation_id)

        if not tabs:
            return OperationResult(success=True, message="No tabs yet")

        views = [self._view(tab, correlation_id) for tab in tabs]
        failed = sum(1 for view in views if view.error is not None)
        message = f"{len(views)} tab(s)"
        if failed:
            message += f", {failed} could not be read"
        return OperationResult(success=failed == 0, message=message, views=views)

    def delete_tab(
        self,
        tab_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Delete a tab's file and manifest entry."""
        correlation_id = correlation_id or create_correlation_id()

        try:
            tab = self._require_tab(tab_name)
            file_existed = self._store.delete_tab(tab)
        except StorageError as e:
            return self._fail("delete_tab", e, tab_name, correlation_id)

        if self._audit_logger:
            self._audit_logger.log_tab_deleted(
                tab_name=tab.name,
                file_name=tab.file_name,
                correlation_id=correlation_id,
            )

        message = f"Tab {tab.name} deleted"
        if not file_existed:
            message += " (its file was already missing)"
        return OperationResult(success=True, message=message, tab=tab)


def create_store(
    settings: LedgerSettings,
    formatter: Optional[LedgerFormatter] = None,
) -> FileTabStore:
    """Build the file-backed store from settings."""
    return FileTabStore(
        data_dir=settings.data_dir,
        formatter=formatter,
        manifest_name=settings.manifest_name,
        tab_suffix=settings.tab_suffix,
    )


def create_app_components(
    settings: Optional[LedgerSettings] = None,
) -> tuple[TabFlow, FileTabStore]:
    """
    Factory function to create all application components.

    Args:
        settings: Explicit settings. Defaults to the cached environment settings.

    Returns:
        (tab_flow, store)
    """
    settings = settings or get_settings()
    formatter = LedgerFormatter()
    store = create_store(settings, formatter)
    tab_flow = TabFlow(
        store=store,
        formatter=formatter,
        audit_logger=AuditLogger(),
    )
    return tab_flow, store
