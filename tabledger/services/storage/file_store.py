"""
Plain-Text Directory Storage Implementation

DESIGN DECISION: Tabs live as ordinary text files because:
1. Users can read and edit their ledgers with any editor
2. No database or server to set up
3. Backups are a file copy

LAYOUT (inside the data directory):
    tabs.txt        manifest, one "<name> -- <file_name>" record per line
    <name>.txt      one tab, one "<description>: <amount> (<kind>)" per line

TRADEOFFS:
- The manifest and the tab files are updated independently, there is
  no transaction spanning both. We order writes so that a failure leaves
  at worst a dangling manifest entry, and readers tolerate that.
- Lookups are a linear scan of the manifest (tab lists are short)

Transaction lines are produced and consumed by LedgerFormatter only.
"""

import os
from pathlib import Path
from typing import Optional, Sequence

import structlog

from tabledger.formatting import LedgerFormatter
from tabledger.models.ledger import InvalidInputError, Tab, Transaction
from tabledger.services.storage.interface import (
    DuplicateError,
    IOFailureError,
    NotFoundError,
    TabStorageInterface,
)


MANIFEST_SEPARATOR = " -- "

logger = structlog.get_logger(__name__)


class FileTabStore(TabStorageInterface):
    """
    File-backed tab registry.

    The data directory is passed in explicitly; it is created on the
    first write, never on construction.
    """

    def __init__(
        self,
        data_dir: Path,
        formatter: Optional[LedgerFormatter] = None,
        manifest_name: str = "tabs.txt",
        tab_suffix: str = ".txt",
    ):
        self._data_dir = Path(data_dir)
        self._formatter = formatter or LedgerFormatter()
        self._manifest_name = manifest_name
        self._tab_suffix = tab_suffix

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def manifest_path(self) -> Path:
        return self._data_dir / self._manifest_name

    def tab_path(self, tab: Tab) -> Path:
        """Resolve a tab's backing file. Absolute manifest paths are kept as-is."""
        path = Path(tab.file_name)
        if path.is_absolute():
            return path
        return self._data_dir / path

    def ensure_data_dir(self) -> Path:
        """Create the data directory if it does not exist yet."""
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailureError(f"Cannot create data directory {self._data_dir}: {e}")
        return self._data_dir

    # -------------------------------------------------------------------------
    # Manifest records
    # -------------------------------------------------------------------------

    def _tab_to_manifest_line(self, tab: Tab) -> str:
        return f"{tab.name}{MANIFEST_SEPARATOR}{tab.file_name}"

    def _manifest_line_to_tab(self, line: str) -> Optional[Tab]:
        """Parse one manifest record; None if it has no separator."""
        name, separator, file_name = line.partition(MANIFEST_SEPARATOR)
        if not separator or not file_name.strip():
            return None
        return Tab(name=name.strip(), file_name=file_name.strip())

    def _write_manifest(self, tabs: Sequence[Tab]) -> None:
        content = "".join(self._tab_to_manifest_line(tab) + "\n" for tab in tabs)
        try:
            with open(self.manifest_path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise IOFailureError(f"Failed to rewrite manifest {self.manifest_path}: {e}")

    @staticmethod
    def _needs_leading_newline(path: Path) -> bool:
        """True if the file has content that does not already end in a newline."""
        with open(path, "rb") as f:
            f.seek(0, os.SEEK_END)
            if f.tell() == 0:
                return False
            f.seek(-1, os.SEEK_END)
            return f.read(1) != b"\n"

    def _validate_name(self, name: str) -> str:
        """
        Clean up a new tab name and make sure it is usable as a file name.

        Any "--" is rejected, not only the padded separator: a name ending
        in "--" would otherwise merge with the separator once the record is
        split again.
        """
        if name is None or not name.strip():
            raise InvalidInputError("Tab name is required")

        name = name.strip()
        if MANIFEST_SEPARATOR.strip() in name:
            raise InvalidInputError(f"Tab name cannot contain '{MANIFEST_SEPARATOR.strip()}'")
        if "\n" in name or "\r" in name:
            raise InvalidInputError("Tab name must be a single line")
        if "\x00" in name:
            raise InvalidInputError("Tab name cannot contain a null character")
        if "/" in name or "\\" in name or name in (".", ".."):
            raise InvalidInputError(f"Tab name cannot be used as a file name: {name!r}")
        if f"{name}{self._tab_suffix}" == self._manifest_name:
            raise InvalidInputError(f"Tab name is reserved: {name!r}")
        return name

    # -------------------------------------------------------------------------
    # TabStorageInterface
    # -------------------------------------------------------------------------

    def list_tabs(self) -> list[Tab]:
        """Read the manifest; a missing manifest means no tabs yet."""
        try:
            content = self.manifest_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise IOFailureError(f"Failed to read manifest {self.manifest_path}: {e}")

        tabs = []
        for line_number, line in enumerate(content.split("\n"), start=1):
            line = line.rstrip("\r")
            if not line.strip():
                continue
            tab = self._manifest_line_to_tab(line)
            if tab is None:
                logger.warning(
                    "manifest_line_skipped",
                    manifest=str(self.manifest_path),
                    line_number=line_number,
                    line=line,
                )
                continue
            tabs.append(tab)
        return tabs

    def find_tab_by_name(self, name: str) -> Optional[Tab]:
        for tab in self.list_tabs():
            if tab.name == name:
                return tab
        return None

    def create_tab(self, name: str) -> Tab:
        name = self._validate_name(name)

        if self.find_tab_by_name(name) is not None:
            raise DuplicateError(f"A tab named '{name}' already exists")

        tab = Tab(name=name, file_name=f"{name}{self._tab_suffix}")
        path = self.tab_path(tab)
        self.ensure_data_dir()

        # "x" refuses to clobber an orphaned file left behind by an old manifest
        try:
            with open(path, "x", encoding="utf-8"):
                pass
        except FileExistsError:
            raise DuplicateError(f"A file for tab '{name}' already exists: {path}")
        except OSError as e:
            raise IOFailureError(f"Couldn't create file {path}: {e}")

        try:
            prefix = ""
            if self.manifest_path.exists() and self._needs_leading_newline(self.manifest_path):
                prefix = "\n"
            with open(self.manifest_path, "a", encoding="utf-8") as f:
                f.write(prefix + self._tab_to_manifest_line(tab) + "\n")
        except OSError as e:
            path.unlink(missing_ok=True)
            raise IOFailureError(f"Failed to register tab '{name}' in manifest: {e}")

        logger.info("tab_file_created", tab=name, path=str(path))
        return tab

    def append_transactions(self, tab: Tab, transactions: Sequence[Transaction]) -> int:
        transactions = list(transactions)
        if not transactions:
            return 0

        path = self.tab_path(tab)
        if not path.is_file():
            raise NotFoundError(f"File for tab '{tab.name}' not found: {path}")

        block = self._formatter.serialize(transactions)
        try:
            prefix = "\n" if self._needs_leading_newline(path) else ""
            with open(path, "a", encoding="utf-8") as f:
                f.write(prefix + block)
        except OSError as e:
            raise IOFailureError(f"Failed to append to tab '{tab.name}': {e}")

        logger.info("tab_appended", tab=tab.name, count=len(transactions))
        return len(transactions)

    def delete_tab(self, tab: Tab) -> bool:
        tabs = self.list_tabs()
        registered = tab in tabs
        path = self.tab_path(tab)

        file_existed = True
        try:
            path.unlink()
        except FileNotFoundError:
            file_existed = False
        except OSError as e:
            raise IOFailureError(f"Failed to delete file {path}: {e}")

        if not registered and not file_existed:
            raise NotFoundError(f"Tab '{tab.name}' not found")

        if not file_existed:
            logger.warning("tab_file_missing_on_delete", tab=tab.name, path=str(path))

        if registered:
            self._write_manifest([t for t in tabs if t != tab])

        return file_existed

    def read_tab(self, tab: Tab) -> str:
        path = self.tab_path(tab)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError(f"File for tab '{tab.name}' not found: {path}")
        except OSError as e:
            raise IOFailureError(f"Failed to read tab '{tab.name}': {e}")
