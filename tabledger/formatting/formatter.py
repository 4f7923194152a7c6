"""
Ledger Line Format and Table Rendering

DESIGN DECISION: The on-disk line format lives here and nowhere else.

    <description>: <amount> (<kind>)

The store hands raw text to parse() and transactions to serialize();
it never builds or splits a line itself. Swapping the encoding means
swapping this class.

PARSING IS PARTIAL-FAILURE TOLERANT:
- A line that does not have the record shape -> malformed_record issue
- A line with the right shape but a bad field -> invalid_input issue
- Either way the line is skipped and parsing continues

Rendering computes column widths on plain text. Colour is applied
afterwards so escape codes never skew the alignment.
"""

import re
from typing import Iterable, Sequence

from pydantic import ValidationError
from rich.text import Text

from tabledger.models.ledger import (
    InvalidInputError,
    ParseIssue,
    ParseResult,
    TabSummary,
    Transaction,
    TransactionKind,
    parse_amount,
    parse_kind,
)


# description is everything before the first ':'
RECORD_PATTERN = re.compile(
    r"^(?P<description>[^:]*):(?P<amount>[^()]*)\((?P<kind>[^()]*)\)$"
)

INCOME_STYLE = "green"
EXPENSE_STYLE = "red"


class LedgerFormatter:
    """
    Converts between raw tab text, Transaction records and display tables.
    """

    def __init__(
        self,
        income_style: str = INCOME_STYLE,
        expense_style: str = EXPENSE_STYLE,
    ):
        self._income_style = income_style
        self._expense_style = expense_style

    # -------------------------------------------------------------------------
    # Storage format
    # -------------------------------------------------------------------------

    def _parse_line(self, line: str) -> Transaction:
        """
        Parse one trimmed, non-empty line.

        Raises:
            LineShapeError: line does not look like a record
            InvalidInputError: a field value is unusable
        """
        match = RECORD_PATTERN.match(line)
        if match is None:
            raise LineShapeError(
                "Expected '<description>: <amount> (<kind>)'"
            )

        description = match.group("description").strip()
        if not description:
            raise InvalidInputError("Description is empty")

        amount = parse_amount(match.group("amount"))
        kind = parse_kind(match.group("kind").strip())

        try:
            return Transaction(description=description, amount=amount, kind=kind)
        except ValidationError as e:
            raise InvalidInputError(str(e))

    def parse(self, content: str) -> ParseResult:
        """
        Parse a tab's raw text into transactions.

        Blank lines are ignored. Bad lines are reported as issues
        and skipped; they never abort the rest of the tab.
        """
        transactions = []
        issues = []

        # only "\n" ends a record; descriptions may hold other line-break characters
        for line_number, raw in enumerate(content.split("\n"), start=1):
            raw = raw.rstrip("\r")
            line = raw.strip()
            if not line:
                continue

            try:
                transactions.append(self._parse_line(line))
            except LineShapeError as e:
                issues.append(ParseIssue(
                    line_number=line_number,
                    line=raw,
                    issue_type="malformed_record",
                    message=str(e),
                ))
            except InvalidInputError as e:
                issues.append(ParseIssue(
                    line_number=line_number,
                    line=raw,
                    issue_type="invalid_input",
                    message=str(e),
                ))

        return ParseResult(transactions=transactions, issues=issues)

    @staticmethod
    def format_stored_amount(amount: float) -> str:
        """
        Amount as written to a tab file: at most two decimals, no trailing zeros.

        3.5 -> "3.5", 2000.0 -> "2000", 12.254 -> "12.25"
        """
        return f"{amount:.2f}".rstrip("0").rstrip(".")

    def serialize_transaction(self, transaction: Transaction) -> str:
        amount = self.format_stored_amount(transaction.amount)
        return f"{transaction.description}: {amount} ({transaction.kind.value})"

    def serialize(self, transactions: Iterable[Transaction]) -> str:
        """Storage lines joined by newlines, without a trailing newline."""
        return "\n".join(self.serialize_transaction(tx) for tx in transactions)

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    @staticmethod
    def format_amount(amount: float) -> str:
        """Amount fixed to 2 decimal places for display."""
        return f"{amount:.2f}"

    def _column_widths(
        self,
        transactions: Sequence[Transaction],
    ) -> tuple[int, int]:
        description_width = max(
            (len(tx.description) for tx in transactions),
            default=0,
        )
        amount_width = max(
            (len(self.format_amount(tx.amount)) for tx in transactions),
            default=0,
        )
        return description_width, amount_width

    @staticmethod
    def _border(description_width: int, amount_width: int) -> str:
        return "+" + "-" * (description_width + amount_width + 5) + "+"

    def render_lines(self, transactions: Sequence[Transaction]) -> list[str]:
        """Table as a list of lines: border, one row per transaction, border."""
        description_width, amount_width = self._column_widths(transactions)
        border = self._border(description_width, amount_width)

        lines = [border]
        for tx in transactions:
            lines.append(
                "| "
                + tx.description.ljust(description_width)
                + " | "
                + self.format_amount(tx.amount).rjust(amount_width)
                + " |"
            )
        lines.append(border)
        return lines

    def render(self, transactions: Sequence[Transaction]) -> str:
        """
        Render transactions as an aligned plain-text table.

        Example:
            +------------------+
            | Coffee |    3.50 |
            | Salary | 2000.00 |
            +------------------+
        """
        return "\n".join(self.render_lines(transactions))

    def render_styled(self, transactions: Sequence[Transaction]) -> Text:
        """
        Same table as render(), with income amounts in green and expenses in red.
        """
        description_width, amount_width = self._column_widths(transactions)
        border = self._border(description_width, amount_width)

        text = Text(border)
        for tx in transactions:
            style = self._income_style if tx.is_income else self._expense_style
            text.append("\n| " + tx.description.ljust(description_width) + " | ")
            text.append(self.format_amount(tx.amount).rjust(amount_width), style=style)
            text.append(" |")
        text.append("\n" + border)
        return text

    def summarize(self, transactions: Iterable[Transaction]) -> TabSummary:
        """Total income, total expense and count."""
        count = 0
        income = 0.0
        expense = 0.0
        for tx in transactions:
            count += 1
            if tx.kind == TransactionKind.INCOME:
                income += tx.amount
            else:
                expense += tx.amount
        return TabSummary(
            transaction_count=count,
            total_income=income,
            total_expense=expense,
        )


class LineShapeError(ValueError):
    """A tab line does not match the record shape."""
    pass
