import json
import tempfile
import unittest
from pathlib import Path

from solders.keypair import Keypair

from testship.history import MemoryStore, load_form_history
from testship.idl import parse_idl
from testship.state import InstructionStore
from testship.tui.commands import (
    cmd_clear_history,
    cmd_describe_instruction,
    cmd_load_idl,
    cmd_open_shared,
    cmd_record_history,
    cmd_restore_history,
    cmd_set_account,
    cmd_set_arg,
    cmd_set_signer,
    cmd_share,
)

from idl_fixtures import SYSTEM_PROGRAM, TOKEN_PROGRAM, TRANSFER_IDL

BASE_URL = "https://app.testship.xyz"


class CommandTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.idl = parse_idl(TRANSFER_IDL)
        self.store = InstructionStore(idl=self.idl, cluster="devnet")


class LoadAndDescribeTests(CommandTestCase):
    def test_load_missing_file(self) -> None:
        result = cmd_load_idl("/nonexistent/idl.json")
        self.assertFalse(result.success)
        self.assertIn("IDL not found", result.message)

    def test_load_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "idl.json"
            path.write_text("{not json")
            result = cmd_load_idl(path)
        self.assertFalse(result.success)
        self.assertTrue(result.message.startswith("Invalid IDL"))

    def test_describe(self) -> None:
        result = cmd_describe_instruction(self.idl, "configure")
        self.assertTrue(result.success)
        kinds = {f["name"]: f["kind"] for f in result.data["args"]}
        self.assertEqual(kinds["paused"], "boolean")
        self.assertEqual(kinds["fee_bps"], "number")
        self.assertEqual(kinds["owners"], "text")
        self.assertFalse(cmd_describe_instruction(self.idl, "nope").success)


class FormCommandTests(CommandTestCase):
    def test_set_arg_coerces(self) -> None:
        result = cmd_set_arg(self.store, self.idl, "transfer", "amount", "1000")
        self.assertTrue(result.success)
        self.assertEqual(self.store.get_instruction_state("transfer").arg_values, {"amount": 1000})

    def test_set_arg_rejects_out_of_range(self) -> None:
        result = cmd_set_arg(self.store, self.idl, "configure", "fee_bps", "70000")
        self.assertFalse(result.success)
        self.assertTrue(result.errors)
        self.assertEqual(self.store.instruction_names(), [])

    def test_set_arg_unknown(self) -> None:
        self.assertFalse(cmd_set_arg(self.store, self.idl, "transfer", "nope", "1").success)
        self.assertFalse(cmd_set_arg(self.store, self.idl, "nope", "amount", "1").success)

    def test_set_account(self) -> None:
        self.assertTrue(cmd_set_account(self.store, "transfer", "recipient", f" {TOKEN_PROGRAM} ").success)
        self.assertFalse(cmd_set_account(self.store, "transfer", "authority", "not-an-address").success)
        self.assertEqual(
            self.store.get_instruction_state("transfer").accounts, {"recipient": TOKEN_PROGRAM}
        )

    def test_set_signer_loads_keypair(self) -> None:
        self.assertFalse(cmd_set_signer(self.store, "transfer", "authority", "").success)
        self.assertFalse(cmd_set_signer(self.store, "transfer", "authority", "/nonexistent/k.json").success)
        keypair = Keypair()
        with tempfile.TemporaryDirectory() as tmp:
            bad = Path(tmp) / "bad.json"
            bad.write_text("[1, 2, 3]")
            self.assertFalse(cmd_set_signer(self.store, "transfer", "authority", str(bad)).success)
            key = Path(tmp) / "id.json"
            key.write_text(json.dumps(list(bytes(keypair))))
            result = cmd_set_signer(self.store, "transfer", "authority", str(key))
        self.assertTrue(result.success)
        self.assertEqual(result.data["pubkey"], str(keypair.pubkey()))
        state = self.store.get_instruction_state("transfer")
        self.assertEqual(state.signer_keypairs["authority"].pubkey(), keypair.pubkey())
        self.assertEqual(state.accounts, {"authority": str(keypair.pubkey())})

    def test_set_signer_keeps_existing_address(self) -> None:
        self.store.set_account("transfer", "authority", TOKEN_PROGRAM)
        with tempfile.TemporaryDirectory() as tmp:
            key = Path(tmp) / "id.json"
            key.write_text(json.dumps(list(bytes(Keypair()))))
            self.assertTrue(cmd_set_signer(self.store, "transfer", "authority", str(key)).success)
        self.assertEqual(self.store.get_instruction_state("transfer").accounts["authority"], TOKEN_PROGRAM)


class ShareCommandTests(CommandTestCase):
    def test_share_without_idl_fails(self) -> None:
        result = cmd_share(InstructionStore(), BASE_URL)
        self.assertFalse(result.success)
        self.assertIn("No IDL", result.message)

    def test_share_and_open(self) -> None:
        self.store.set_arg_value("transfer", "amount", 5)
        self.store.set_account("transfer", "recipient", TOKEN_PROGRAM)
        self.store.set_signer_keypair("transfer", "authority", "/keys/authority.json")
        self.store.set_active_instruction("transfer")
        shared = cmd_share(self.store, BASE_URL)
        self.assertTrue(shared.success)

        target = InstructionStore()
        opened = cmd_open_shared(target, shared.data["url"])
        self.assertTrue(opened.success)
        self.assertEqual(opened.data["signers_needed"], ["transfer.authority"])
        self.assertEqual(target.active_instruction, "transfer")
        self.assertEqual(target.cluster, "devnet")
        self.assertEqual(target.idl.name, "vault")
        state = target.get_instruction_state("transfer")
        self.assertEqual(state.arg_values, {"amount": 5})
        self.assertEqual(state.accounts, {"recipient": TOKEN_PROGRAM})
        self.assertEqual(state.signer_keypairs, {})

    def test_failed_open_leaves_store_untouched(self) -> None:
        self.store.set_arg_value("transfer", "amount", 7)
        self.store.set_active_instruction("transfer")
        result = cmd_open_shared(self.store, f"{BASE_URL}/?state=v1.garbage!")
        self.assertFalse(result.success)
        self.assertTrue(result.message.startswith("Failed to load shared state"))
        self.assertEqual(self.store.active_instruction, "transfer")
        self.assertEqual(self.store.get_instruction_state("transfer").arg_values, {"amount": 7})


class HistoryCommandTests(CommandTestCase):
    def test_record_and_restore(self) -> None:
        history = MemoryStore()
        self.store.set_arg_value("transfer", "amount", 1)
        self.store.set_arg_value("transfer", "memo", "saved")
        self.store.set_account("transfer", "recipient", SYSTEM_PROGRAM)
        self.store.set_signer_keypair("transfer", "authority", "/keys/a.json")
        cmd_record_history(history, self.store, "transfer")
        self.assertEqual(load_form_history(history, "transfer"), {"amount": 1, "memo": "saved"})
        for key in history.keys_with_prefix(""):
            self.assertNotIn("/keys/a.json", history.get(key))

        fresh = InstructionStore(idl=self.idl)
        fresh.set_arg_value("transfer", "amount", 99)
        result = cmd_restore_history(history, fresh, "transfer")
        self.assertEqual(result.data["restored"], 2)
        state = fresh.get_instruction_state("transfer")
        self.assertEqual(state.arg_values, {"amount": 99, "memo": "saved"})
        self.assertEqual(state.accounts, {"recipient": SYSTEM_PROGRAM})

    def test_clear(self) -> None:
        history = MemoryStore({"savedAccounts": "[]"})
        cmd_record_history(history, self.store, "transfer")
        self.store.set_active_instruction("transfer")
        result = cmd_clear_history(history, self.store)
        self.assertEqual(result.data["removed"], 2)
        self.assertEqual(history.keys_with_prefix(""), ["savedAccounts"])
        self.assertIsNone(self.store.active_instruction)


if __name__ == "__main__":
    unittest.main()
