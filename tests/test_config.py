import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from testship import config


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name) / "cfg" / "config.toml"
        patcher = patch.object(config, "CONFIG_PATH", self.path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_first_load_writes_defaults(self) -> None:
        self.assertFalse(self.path.exists())
        defaults = config.get_defaults()
        self.assertTrue(self.path.exists())
        self.assertEqual(defaults["base_url"], "https://app.testship.xyz")
        self.assertEqual(defaults["cluster"], "devnet")

    def test_set_defaults_updates_only_given_keys(self) -> None:
        config.set_defaults(base_url="https://share.example")
        config.set_defaults(cluster="testnet")
        defaults = config.get_defaults()
        self.assertEqual(defaults["base_url"], "https://share.example")
        self.assertEqual(defaults["cluster"], "testnet")
        self.assertEqual(defaults["rpc_url"], "https://api.testnet.solana.com")

    def test_explicit_rpc_wins_over_cluster_default(self) -> None:
        config.set_defaults(cluster="mainnet-beta", rpc_url="http://127.0.0.1:8899")
        self.assertEqual(config.get_defaults()["rpc_url"], "http://127.0.0.1:8899")

    def test_history_path_expands_user(self) -> None:
        config.set_defaults(history_path="~/h.toml")
        self.assertEqual(config.history_path(), Path("~/h.toml").expanduser())


if __name__ == "__main__":
    unittest.main()
