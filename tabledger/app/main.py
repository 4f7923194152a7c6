"""
Interactive Terminal Frontend for tabledger

This is the menu loop the user interacts with:
Create tab, Append to tab, Display tab(s), Delete tab, Exit.

DESIGN PRINCIPLES:
1. Every action ends with a clear success or failure line
2. A failed action returns to the menu, it never ends the program
3. Every prompt that picks from a list has a safe default (Cancel/Exit)

All prompts go through rich so a test can drive a whole session by
passing an input stream.
"""

from typing import Optional, TextIO

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.text import Text

from tabledger.audit import configure_logging
from tabledger.config import get_settings
from tabledger.models.ledger import (
    InvalidInputError,
    OperationResult,
    TabView,
    Transaction,
    TransactionKind,
)
from tabledger.orchestrator import TabFlow, create_app_components
from tabledger.services.storage import IOFailureError


MENU = [
    ("1", "Create tab"),
    ("2", "Append to tab"),
    ("3", "Display tab(s)"),
    ("4", "Delete tab"),
    ("5", "Exit"),
]
EXIT_CHOICE = "5"
CANCEL_CHOICE = "0"
ALL_TABS_CHOICE = "a"


class _LineStream:
    """
    Input stream whose lines come back without the newline, like input().

    rich only treats an exactly empty answer as "use the default".
    """

    def __init__(self, stream: TextIO):
        self._stream = stream

    def readline(self) -> str:
        return self._stream.readline().rstrip("\r\n")


class LedgerShell:
    """
    Menu-driven loop over a TabFlow.

    Args:
        tab_flow: The orchestrator every action goes through
        console: Output console (a recording console in tests)
        stream: Optional input stream; None reads from the terminal
        debug: Show exception class names next to failures
    """

    def __init__(
        self,
        tab_flow: TabFlow,
        console: Optional[Console] = None,
        stream: Optional[TextIO] = None,
        debug: bool = False,
    ):
        self._flow = tab_flow
        self._console = console or Console()
        self._stream = _LineStream(stream) if stream is not None else None
        self._debug = debug

    # -------------------------------------------------------------------------
    # Prompt helpers
    # -------------------------------------------------------------------------

    def _ask(self, message: str, **kwargs) -> str:
        return Prompt.ask(message, console=self._console, stream=self._stream, **kwargs)

    def _confirm(self, message: str, default: bool = False) -> bool:
        return Confirm.ask(message, console=self._console, stream=self._stream, default=default)

    def _say(self, message: str, style: Optional[str] = None) -> None:
        self._console.print(Text(message, style=style or ""), soft_wrap=True)

    def _report(self, result: OperationResult) -> None:
        if result.success:
            self._say(f"✔ {result.message}", style="green")
            return
        message = f"✖ {result.message}"
        if self._debug and result.error_type:
            message += f" [{result.error_type}]"
        self._say(message, style="red")

    # -------------------------------------------------------------------------
    # Shared steps
    # -------------------------------------------------------------------------

    def _choose_action(self) -> str:
        self._console.print()
        for key, label in MENU:
            self._say(f"  {key}. {label}")
        return self._ask(
            "What do you want to do?",
            choices=[key for key, _ in MENU],
            default=EXIT_CHOICE,
        )

    def _select_tab(self, allow_all: bool = False) -> Optional[str]:
        """
        Let the user pick a tab.

        Returns the tab name, ALL_TABS_CHOICE, or None if cancelled
        or there is nothing to pick.
        """
        tabs, error = self._flow.list_tabs()
        if error:
            self._say(f"✖ {error}", style="red")
            return None
        if not tabs:
            self._say("No tabs yet. Create one first.", style="yellow")
            return None

        choices = {CANCEL_CHOICE: None}
        self._say(f"  {CANCEL_CHOICE}. Cancel")
        if allow_all:
            choices[ALL_TABS_CHOICE] = ALL_TABS_CHOICE
            self._say(f"  {ALL_TABS_CHOICE}. All tabs")
        for index, tab in enumerate(tabs, start=1):
            choices[str(index)] = tab.name
            self._say(f"  {index}. {tab.name}")

        answer = self._ask(
            "Choose a tab",
            choices=list(choices),
            default=CANCEL_CHOICE,
            show_choices=False,
        )
        return choices[answer]

    def _collect_transactions(self) -> list[Transaction]:
        """Ask for entries until the user says no. Bad entries are skipped."""
        transactions = []
        while self._confirm("Do you want to add an entry?", default=False):
            description = self._ask("Enter the description")
            amount = self._ask("Enter the amount")
            kind = self._ask(
                "Is this an income or expense?",
                choices=[kind.value for kind in TransactionKind],
                default=TransactionKind.EXPENSE.value,
            )
            try:
                transactions.append(self._flow.build_transaction(description, amount, kind))
            except InvalidInputError as e:
                self._say(f"✖ Entry skipped: {e}", style="red")
        return transactions

    def _print_view(self, view: TabView) -> None:
        self._say(view.tab.name, style="bold")
        if view.error is not None:
            self._say(f"✖ {view.error}", style="red")
            return

        self._console.print(self._flow.formatter.render_styled(view.transactions), soft_wrap=True)
        for issue in view.issues:
            self._say(f"⚠ Line {issue.line_number} skipped: {issue.message}", style="yellow")

        summary = view.summary
        fmt = self._flow.formatter.format_amount
        line = Text("Income ")
        line.append(fmt(summary.total_income), style="green")
        line.append("  Expense ")
        line.append(fmt(summary.total_expense), style="red")
        line.append(f"  Balance {fmt(summary.balance)}", style="bold")
        self._console.print(line, soft_wrap=True)

    # -------------------------------------------------------------------------
    # Menu actions
    # -------------------------------------------------------------------------

    def create_tab(self) -> None:
        name = self._ask("Enter the name of the new tab", default="New tab")
        result = self._flow.create_tab(name)
        self._report(result)
        if not result.success:
            return

        transactions = self._collect_transactions()
        if transactions:
            self._report(self._flow.append_to_tab(result.tab.name, transactions))

    def append_to_tab(self) -> None:
        tab_name = self._select_tab()
        if tab_name is None:
            return

        current = self._flow.view_tab(tab_name)
        if not current.success:
            self._report(current)
            return
        for view in current.views:
            self._print_view(view)

        transactions = self._collect_transactions()
        self._report(self._flow.append_to_tab(tab_name, transactions))

    def display_tabs(self) -> None:
        choice = self._select_tab(allow_all=True)
        if choice is None:
            return

        if choice == ALL_TABS_CHOICE:
            result = self._flow.view_all_tabs()
        else:
            result = self._flow.view_tab(choice)

        for view in result.views:
            self._print_view(view)
        # single-tab read errors were already printed with the view
        if not result.views or (choice == ALL_TABS_CHOICE and not result.success):
            self._report(result)

    def delete_tab(self) -> None:
        tab_name = self._select_tab()
        if tab_name is None:
            return
        if not self._confirm(f"Delete tab {escape(tab_name)} and its file?", default=False):
            self._say("Nothing deleted.")
            return
        self._report(self._flow.delete_tab(tab_name))

    def run(self) -> int:
        """Loop until the user chooses Exit. Returns the process exit code."""
        actions = {
            "1": self.create_tab,
            "2": self.append_to_tab,
            "3": self.display_tabs,
            "4": self.delete_tab,
        }
        while True:
            choice = self._choose_action()
            if choice == EXIT_CHOICE:
                self._say("Bye!")
                return 0
            actions[choice]()


def main() -> int:
    """Console script entry point."""
    console = Console()

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(Text(f"Invalid configuration:\n{e}", style="red"))
        return 2

    tab_flow, store = create_app_components(settings)

    try:
        store.ensure_data_dir()
        configure_logging(settings.log_path, settings.log_level)
    except (IOFailureError, OSError) as e:
        console.print(Text(f"Warning: {e}", style="yellow"))
        configure_logging(None, "WARNING")

    shell = LedgerShell(tab_flow, console=console, debug=settings.debug_mode)
    try:
        return shell.run()
    except (KeyboardInterrupt, EOFError):
        console.print()
        console.print("Bye!")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
