import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from testship import config
from testship.cli import main
from testship.history import TomlFileStore, save_form_history

from idl_fixtures import TOKEN_PROGRAM, TRANSFER_IDL


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)
        patcher = patch.object(config, "CONFIG_PATH", self.tmp / "config.toml")
        patcher.start()
        self.addCleanup(patcher.stop)
        self.idl_path = self.tmp / "vault.json"
        self.idl_path.write_text(json.dumps(TRANSFER_IDL))

    def run_cli(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def write_state(self, data: dict) -> Path:
        path = self.tmp / "state.json"
        path.write_text(json.dumps(data))
        return path


class FieldsCommandTests(CliTestCase):
    def test_lists_fields(self) -> None:
        code, out = self.run_cli("fields", str(self.idl_path))
        self.assertEqual(code, 0)
        self.assertIn("vault: 2 instructions", out)
        self.assertIn("amount: u64 -> number", out)
        self.assertIn("account authority (signer)", out)

    def test_json_for_one_instruction(self) -> None:
        code, out = self.run_cli("fields", str(self.idl_path), "--instruction", "configure", "--json")
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(list(data), ["configure"])
        self.assertEqual(data["configure"][0], {"name": "paused", "type": "bool", "kind": "boolean"})

    def test_errors_return_one(self) -> None:
        code, out = self.run_cli("fields", str(self.tmp / "missing.json"))
        self.assertEqual(code, 1)
        self.assertIn("IDL not found", out)
        code, out = self.run_cli("fields", str(self.idl_path), "--instruction", "nope")
        self.assertEqual(code, 1)
        self.assertIn("Unknown instruction: nope", out)


class ShareOpenCommandTests(CliTestCase):
    def test_share_then_open(self) -> None:
        state = self.write_state(
            {
                "activeInstruction": "transfer",
                "instructions": {
                    "transfer": {
                        "argValues": {"amount": 42, "memo": "hello"},
                        "accounts": {"recipient": TOKEN_PROGRAM},
                        "signerKeypairs": {"authority": "/keys/authority.json"},
                    }
                },
            }
        )
        code, out = self.run_cli(
            "share", str(self.idl_path), "--state", str(state), "--base-url", "https://share.example/app"
        )
        self.assertEqual(code, 0)
        url = out.strip().splitlines()[-1]
        self.assertTrue(url.startswith("https://share.example/app?state=v1."))

        idl_out = self.tmp / "decoded.json"
        code, out = self.run_cli("open", url, "--json", "--idl-out", str(idl_out))
        self.assertEqual(code, 0)
        data = json.loads(out[out.index("{"):])
        self.assertEqual(data["program"], "vault")
        self.assertEqual(data["cluster"], "devnet")
        self.assertEqual(data["activeInstruction"], "transfer")
        transfer = data["instructions"]["transfer"]
        self.assertEqual(transfer["argValues"], {"amount": 42, "memo": "hello"})
        self.assertEqual(transfer["signerKeypairs"], {})
        self.assertEqual(json.loads(idl_out.read_text())["metadata"]["name"], "vault")

        code, out = self.run_cli("open", url)
        self.assertEqual(code, 0)
        self.assertIn("signer authority: keypair required", out)
        self.assertNotIn("/keys/authority.json", out)

    def test_share_warns_about_unknown_instructions(self) -> None:
        state = self.write_state({"instructions": {"ghost": {"argValues": {"x": 1}}}})
        code, out = self.run_cli("share", str(self.idl_path), "--state", str(state), "--cluster", "testnet")
        self.assertEqual(code, 0)
        self.assertIn("Warning: ghost is not an instruction of vault", out)
        self.assertIn("https://app.testship.xyz", out)

    def test_share_bad_state_file(self) -> None:
        path = self.tmp / "state.json"
        path.write_text("[1, 2]")
        code, out = self.run_cli("share", str(self.idl_path), "--state", str(path))
        self.assertEqual(code, 1)
        self.assertIn("JSON object", out)

    def test_open_bad_link(self) -> None:
        code, out = self.run_cli("open", "https://app.testship.xyz/?other=1")
        self.assertEqual(code, 1)
        self.assertIn("no 'state' parameter", out)


class RequestCommandTests(CliTestCase):
    def test_request_for_active_instruction(self) -> None:
        state = self.write_state(
            {
                "activeInstruction": "transfer",
                "instructions": {
                    "transfer": {
                        "argValues": {"amount": 42},
                        "accounts": {"recipient": TOKEN_PROGRAM},
                        "signerKeypairs": {"authority": "/keys/authority.json"},
                    }
                },
            }
        )
        code, out = self.run_cli("request", str(self.idl_path), "--state", str(state))
        self.assertEqual(code, 0)
        request = json.loads(out)
        self.assertEqual(request["programId"], TRANSFER_IDL["address"])
        self.assertEqual(request["instruction"], "transfer")
        self.assertEqual(request["data"], {"amount": 42})
        self.assertEqual(
            request["accounts"],
            {"recipient": TOKEN_PROGRAM, "systemProgram": "11111111111111111111111111111111"},
        )
        self.assertNotIn("/keys/authority.json", out)

    def test_request_needs_an_instruction(self) -> None:
        state = self.write_state({"instructions": {}})
        code, out = self.run_cli("request", str(self.idl_path), "--state", str(state))
        self.assertEqual(code, 1)
        self.assertIn("activeInstruction", out)
        code, out = self.run_cli(
            "request", str(self.idl_path), "--state", str(state), "--instruction", "nope"
        )
        self.assertEqual(code, 1)
        self.assertIn("Unknown instruction: nope", out)

    def test_program_id_override(self) -> None:
        state = self.write_state({"instructions": {"configure": {"argValues": {"paused": True}}}})
        code, out = self.run_cli(
            "request",
            str(self.idl_path),
            "--state",
            str(state),
            "--instruction",
            "configure",
            "--program-id",
            TOKEN_PROGRAM,
        )
        self.assertEqual(code, 0)
        request = json.loads(out)
        self.assertEqual(request["programId"], TOKEN_PROGRAM)
        self.assertEqual(request["data"], {"paused": True})
        self.assertEqual(request["accounts"], {})


class HistoryAndConfigCommandTests(CliTestCase):
    def test_history_clear(self) -> None:
        history = self.tmp / "history.toml"
        store = TomlFileStore(history)
        save_form_history(store, "transfer", {"amount": 1})
        store.set("savedAccounts", "[]")
        code, out = self.run_cli("history", "clear", "--path", str(history))
        self.assertEqual(code, 0)
        self.assertIn("Cleared 1 form entries", out)
        self.assertEqual(TomlFileStore(history).keys_with_prefix(""), ["savedAccounts"])

    def test_config_set_and_show(self) -> None:
        code, _ = self.run_cli("config", "set", "--cluster", "local", "--base-url", "https://x.example")
        self.assertEqual(code, 0)
        code, out = self.run_cli("config", "show")
        self.assertEqual(code, 0)
        self.assertIn("cluster = local", out)
        self.assertIn("rpc_url = http://localhost:8899", out)
        self.assertIn("base_url = https://x.example", out)

    def test_tui_is_launched_with_arguments(self) -> None:
        with patch("testship.tui.launch_tui", return_value=0) as launch:
            code, _ = self.run_cli("tui", str(self.idl_path), "--url", "https://app.testship.xyz/?state=v1.x")
        self.assertEqual(code, 0)
        launch.assert_called_once_with(idl_path=self.idl_path, share_url="https://app.testship.xyz/?state=v1.x")


if __name__ == "__main__":
    unittest.main()
