import tempfile
import unittest
from pathlib import Path

from testship.history import (
    MemoryStore,
    SavedAccount,
    TomlFileStore,
    add_saved_account,
    clear_form_history,
    load_account_history,
    load_form_history,
    load_saved_accounts,
    remove_saved_account,
    save_account_history,
    save_form_history,
    saved_accounts_for,
)

from idl_fixtures import SYSTEM_PROGRAM, TOKEN_PROGRAM


class FormHistoryTests(unittest.TestCase):
    def test_empty_history_is_fine(self) -> None:
        store = MemoryStore()
        self.assertEqual(load_form_history(store, "transfer"), {})
        self.assertEqual(load_account_history(store, "transfer"), {})
        self.assertEqual(load_saved_accounts(store), [])
        self.assertEqual(clear_form_history(store), 0)

    def test_save_and_load(self) -> None:
        store = MemoryStore()
        save_form_history(store, "transfer", {"amount": 100, "memo": "hi"})
        save_account_history(store, "transfer", {"recipient": TOKEN_PROGRAM})
        self.assertEqual(load_form_history(store, "transfer"), {"amount": 100, "memo": "hi"})
        self.assertEqual(load_account_history(store, "transfer"), {"recipient": TOKEN_PROGRAM})
        self.assertEqual(store.get("testship_form_transfer"), '{"amount": 100, "memo": "hi"}')

    def test_corrupt_entries_read_as_empty(self) -> None:
        store = MemoryStore({"testship_form_transfer": "{oops", "testship_accounts_transfer": "[1]"})
        self.assertEqual(load_form_history(store, "transfer"), {})
        self.assertEqual(load_account_history(store, "transfer"), {})

    def test_clear_removes_only_prefixed_keys(self) -> None:
        store = MemoryStore(
            {
                "testship_form_a": "{}",
                "testship_form_b": "{}",
                "testship_accounts_a": "{}",
                "savedAccounts": "[]",
                "hasVisited": "true",
            }
        )
        self.assertEqual(clear_form_history(store), 3)
        self.assertEqual(sorted(store.keys_with_prefix("")), ["hasVisited", "savedAccounts"])


class SavedAccountsTests(unittest.TestCase):
    def test_add_dedupes_and_prepends(self) -> None:
        store = MemoryStore()
        self.assertTrue(add_saved_account(store, SavedAccount(SYSTEM_PROGRAM, "system")))
        self.assertTrue(add_saved_account(store, SavedAccount(TOKEN_PROGRAM, "token", "transfer")))
        self.assertFalse(add_saved_account(store, SavedAccount(SYSTEM_PROGRAM, "again")))
        self.assertEqual([a.name for a in load_saved_accounts(store)], ["token", "system"])

    def test_filter_and_remove(self) -> None:
        store = MemoryStore()
        add_saved_account(store, SavedAccount(SYSTEM_PROGRAM, "system"))
        add_saved_account(store, SavedAccount(TOKEN_PROGRAM, "token", "transfer"))
        self.assertEqual([a.address for a in saved_accounts_for(store, "transfer")], [TOKEN_PROGRAM])
        self.assertEqual(len(saved_accounts_for(store)), 2)
        self.assertTrue(remove_saved_account(store, TOKEN_PROGRAM))
        self.assertFalse(remove_saved_account(store, TOKEN_PROGRAM))
        self.assertEqual([a.address for a in load_saved_accounts(store)], [SYSTEM_PROGRAM])


class TomlFileStoreTests(unittest.TestCase):
    def test_persists_between_instances(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "history.toml"
            store = TomlFileStore(path)
            self.assertIsNone(store.get("missing"))
            save_form_history(store, "transfer", {"memo": "a \"quoted\" value"})
            store.set("other", "x")
            reopened = TomlFileStore(path)
            self.assertEqual(load_form_history(reopened, "transfer"), {"memo": 'a "quoted" value'})
            self.assertEqual(reopened.keys_with_prefix("testship_"), ["testship_form_transfer"])
            self.assertEqual(clear_form_history(reopened), 1)
            self.assertEqual(TomlFileStore(path).keys_with_prefix(""), ["other"])
            reopened.remove("missing")


if __name__ == "__main__":
    unittest.main()
