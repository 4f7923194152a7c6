"""
Tests for the plain-text directory tab store.

Every test works inside pytest's tmp_path; the data directory starts
out absent so the empty-state behaviour is exercised too.
"""

import pytest

from tabledger.models.ledger import InvalidInputError, Tab, Transaction
from tabledger.services.storage import file_store
from tabledger.services.storage import (
    DuplicateError,
    FileTabStore,
    IOFailureError,
    NotFoundError,
    StorageError,
)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "ledger"


@pytest.fixture
def store(data_dir):
    return FileTabStore(data_dir)


def _tx(description, amount, kind="Expense"):
    return Transaction(description=description, amount=amount, kind=kind)


class TestListTabs:
    """Tests for listing and lookup."""

    def test_fresh_directory_has_no_tabs(self, store, data_dir):
        """A missing manifest is an empty state, not an error."""
        assert store.list_tabs() == []
        assert not data_dir.exists()

    def test_listing_is_idempotent(self, store):
        store.create_tab("Food")
        store.create_tab("Rent")
        assert store.list_tabs() == store.list_tabs()
        assert [tab.name for tab in store.list_tabs()] == ["Food", "Rent"]

    def test_find_tab_by_name(self, store):
        store.create_tab("Food")
        assert store.find_tab_by_name("Food") == Tab(name="Food", file_name="Food.txt")
        assert store.find_tab_by_name("Nope") is None

    def test_duplicate_manifest_entries_resolve_to_first(self, store, data_dir):
        data_dir.mkdir()
        (data_dir / "tabs.txt").write_text(
            "Food -- Food.txt\nFood -- Food-old.txt\n", encoding="utf-8"
        )
        assert store.find_tab_by_name("Food").file_name == "Food.txt"

    def test_malformed_manifest_lines_are_skipped(self, store, data_dir):
        data_dir.mkdir()
        (data_dir / "tabs.txt").write_text(
            "Food -- Food.txt\ngarbage\n\nRent -- Rent.txt\n", encoding="utf-8"
        )
        assert [tab.name for tab in store.list_tabs()] == ["Food", "Rent"]

    def test_absolute_paths_in_manifest_are_honoured(self, store, data_dir, tmp_path):
        """Older manifests stored absolute file paths."""
        legacy = tmp_path / "elsewhere" / "Trip.txt"
        legacy.parent.mkdir()
        legacy.write_text("Hotel: 120 (Expense)", encoding="utf-8")
        data_dir.mkdir()
        (data_dir / "tabs.txt").write_text(f"Trip -- {legacy}\n", encoding="utf-8")

        tab = store.find_tab_by_name("Trip")
        assert store.tab_path(tab) == legacy
        assert store.read_tab(tab) == "Hotel: 120 (Expense)"


class TestCreateTab:
    """Tests for tab creation."""

    def test_create_writes_empty_file_and_manifest_record(self, store, data_dir):
        tab = store.create_tab("Groceries")

        assert tab == Tab(name="Groceries", file_name="Groceries.txt")
        assert (data_dir / "Groceries.txt").read_text(encoding="utf-8") == ""
        assert (data_dir / "tabs.txt").read_text(encoding="utf-8") == "Groceries -- Groceries.txt\n"

    def test_create_strips_name(self, store):
        assert store.create_tab("  Holiday  ").name == "Holiday"

    @pytest.mark.parametrize("name", ["", "   ", "a -- b", "a--b", "a/b", "a\\b", "..", ".", "two\nlines"])
    def test_create_rejects_unusable_names(self, store, name):
        with pytest.raises(InvalidInputError):
            store.create_tab(name)
        assert store.list_tabs() == []

    @pytest.mark.parametrize("name", ["Trip --", "-- Trip"])
    def test_create_rejects_dashes_that_would_merge_with_separator(self, store, name):
        with pytest.raises(InvalidInputError, match="--"):
            store.create_tab(name)

    def test_create_rejects_null_character(self, store, data_dir):
        with pytest.raises(InvalidInputError, match="null"):
            store.create_tab("bad\x00name")
        assert store.list_tabs() == []

    @pytest.mark.parametrize("separator", ["\x1c", "\x0b", "\u2028", "\x85"])
    def test_name_with_other_line_breaks_survives_listing(self, store, separator):
        """Only a newline ends a manifest record."""
        name = f"a{separator}b"
        tab = store.create_tab(name)

        assert store.list_tabs() == [tab]
        assert store.find_tab_by_name(name) == tab

    def test_create_rejects_name_that_collides_with_manifest(self, store):
        with pytest.raises(InvalidInputError, match="reserved"):
            store.create_tab("tabs")

    def test_create_rejects_duplicate_name(self, store):
        store.create_tab("Food")
        with pytest.raises(DuplicateError):
            store.create_tab("Food")
        assert len(store.list_tabs()) == 1

    def test_create_does_not_clobber_orphan_file(self, store, data_dir):
        data_dir.mkdir()
        orphan = data_dir / "Food.txt"
        orphan.write_text("Bread: 2 (Expense)", encoding="utf-8")

        with pytest.raises(DuplicateError):
            store.create_tab("Food")
        assert orphan.read_text(encoding="utf-8") == "Bread: 2 (Expense)"
        assert store.list_tabs() == []

    def test_create_fails_when_data_dir_is_not_a_directory(self, tmp_path):
        blocker = tmp_path / "ledger"
        blocker.write_text("not a directory", encoding="utf-8")
        store = FileTabStore(blocker)

        with pytest.raises(IOFailureError):
            store.create_tab("Food")

    def test_create_removes_file_when_manifest_write_fails(self, store, data_dir, monkeypatch):
        def broken_manifest_line(tab):
            raise OSError("disk full")

        monkeypatch.setattr(store, "_tab_to_manifest_line", broken_manifest_line)

        with pytest.raises(IOFailureError, match="manifest"):
            store.create_tab("Food")
        assert not (data_dir / "Food.txt").exists()

    def test_create_after_hand_edited_manifest(self, store, data_dir):
        """A manifest without a trailing newline still gets one record per line."""
        data_dir.mkdir()
        (data_dir / "tabs.txt").write_text("Food -- Food.txt", encoding="utf-8")
        (data_dir / "Food.txt").write_text("", encoding="utf-8")

        store.create_tab("Rent")
        assert [tab.name for tab in store.list_tabs()] == ["Food", "Rent"]

    def test_custom_layout(self, data_dir):
        store = FileTabStore(data_dir, manifest_name="index.lst", tab_suffix=".ledger")
        store.create_tab("Food")
        assert (data_dir / "Food.ledger").exists()
        assert (data_dir / "index.lst").read_text(encoding="utf-8") == "Food -- Food.ledger\n"


class TestAppendAndRead:
    """Tests for appending transactions and reading tabs back."""

    def test_append_empty_sequence_is_noop(self, store):
        tab = store.create_tab("Food")
        assert store.append_transactions(tab, []) == 0
        assert store.read_tab(tab) == ""

    def test_first_append_has_no_leading_newline(self, store):
        tab = store.create_tab("Food")
        count = store.append_transactions(tab, [_tx("Coffee", 3.5), _tx("Salary", 2000, "Income")])

        assert count == 2
        assert store.read_tab(tab) == "Coffee: 3.5 (Expense)\nSalary: 2000 (Income)"

    def test_appends_are_additive_and_ordered(self, store):
        tab = store.create_tab("Food")
        store.append_transactions(tab, [_tx("Bread", 2)])
        store.append_transactions(tab, [_tx("Milk", 1.2), _tx("Eggs", 3)])

        assert store.read_tab(tab) == "Bread: 2 (Expense)\nMilk: 1.2 (Expense)\nEggs: 3 (Expense)"

    def test_append_after_trailing_newline_adds_no_blank_line(self, store, data_dir):
        tab = store.create_tab("Food")
        (data_dir / "Food.txt").write_text("Bread: 2 (Expense)\n", encoding="utf-8")

        store.append_transactions(tab, [_tx("Milk", 1)])
        assert store.read_tab(tab) == "Bread: 2 (Expense)\nMilk: 1 (Expense)"

    def test_append_accepts_any_iterable(self, store):
        tab = store.create_tab("Food")
        store.append_transactions(tab, (tx for tx in [_tx("Bread", 2)]))
        assert store.read_tab(tab) == "Bread: 2 (Expense)"

    def test_append_to_missing_file_raises_not_found(self, store, data_dir):
        tab = store.create_tab("Food")
        (data_dir / "Food.txt").unlink()

        with pytest.raises(NotFoundError):
            store.append_transactions(tab, [_tx("Bread", 2)])
        assert not (data_dir / "Food.txt").exists()

    def test_read_missing_tab_raises_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.read_tab(Tab(name="Ghost", file_name="Ghost.txt"))

    def test_storage_errors_share_a_base_class(self):
        for error in (NotFoundError, DuplicateError, IOFailureError):
            assert issubclass(error, StorageError)


class TestDeleteTab:
    """Tests for tab deletion."""

    def test_delete_removes_file_and_manifest_entry(self, store, data_dir):
        food = store.create_tab("Food")
        store.create_tab("Rent")
        store.append_transactions(food, [_tx("Bread", 2)])

        assert store.delete_tab(food) is True

        assert food not in store.list_tabs()
        assert [tab.name for tab in store.list_tabs()] == ["Rent"]
        assert not (data_dir / "Food.txt").exists()
        with pytest.raises(NotFoundError):
            store.read_tab(food)

    def test_delete_last_tab_leaves_empty_manifest(self, store, data_dir):
        tab = store.create_tab("Food")
        store.delete_tab(tab)
        assert store.list_tabs() == []
        assert (data_dir / "tabs.txt").read_text(encoding="utf-8") == ""

    def test_delete_dangling_entry_cleans_manifest(self, store, data_dir):
        tab = store.create_tab("Food")
        (data_dir / "Food.txt").unlink()

        assert store.delete_tab(tab) is False
        assert store.list_tabs() == []

    def test_delete_unknown_tab_raises_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.delete_tab(Tab(name="Ghost", file_name="Ghost.txt"))

    def test_delete_removes_every_identical_entry(self, store, data_dir):
        data_dir.mkdir()
        (data_dir / "Food.txt").write_text("", encoding="utf-8")
        (data_dir / "tabs.txt").write_text(
            "Food -- Food.txt\nRent -- Rent.txt\nFood -- Food.txt\n", encoding="utf-8"
        )

        store.delete_tab(Tab(name="Food", file_name="Food.txt"))
        assert (data_dir / "tabs.txt").read_text(encoding="utf-8") == "Rent -- Rent.txt\n"

    def test_manifest_rewrite_failure_leaves_dangling_entry(self, store, monkeypatch):
        """The file goes first; a failed rewrite leaves an entry readers tolerate."""
        tab = store.create_tab("Food")
        store.append_transactions(tab, [_tx("Bread", 2)])

        def broken_open(*args, **kwargs):
            raise OSError("disk full")

        with monkeypatch.context() as m:
            m.setattr(file_store, "open", broken_open, raising=False)
            with pytest.raises(IOFailureError, match="manifest"):
                store.delete_tab(tab)

        assert store.list_tabs() == [tab]
        with pytest.raises(NotFoundError):
            store.read_tab(tab)

    def test_name_can_be_reused_after_delete(self, store):
        tab = store.create_tab("Food")
        store.delete_tab(tab)
        assert store.create_tab("Food") == tab
