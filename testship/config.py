"""User configuration — persists defaults at ~/.testship/config.toml."""

from __future__ import annotations

from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

from .constants import CLUSTER_URLS, DEFAULT_BASE_URL, DEFAULT_CLUSTER

CONFIG_DIR = Path.home() / ".testship"
CONFIG_PATH = CONFIG_DIR / "config.toml"

_DEFAULT_CONFIG: dict[str, Any] = {
    "defaults": {
        "version": 1,
        "base_url": DEFAULT_BASE_URL,
        "cluster": DEFAULT_CLUSTER,
        "rpc_url": CLUSTER_URLS[DEFAULT_CLUSTER],
        "history_path": str(CONFIG_DIR / "history.toml"),
    },
}


def _fresh_default_config() -> dict[str, Any]:
    return {"defaults": dict(_DEFAULT_CONFIG["defaults"])}


def _ensure_dir() -> None:
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)


def load_config() -> dict[str, Any]:
    """Load or create the config file."""
    if not CONFIG_PATH.exists():
        defaults = _fresh_default_config()
        save_config(defaults)
        return defaults
    return tomllib.loads(CONFIG_PATH.read_text())


def save_config(data: dict[str, Any]) -> None:
    _ensure_dir()
    CONFIG_PATH.write_bytes(tomli_w.dumps(data).encode())


def get_defaults() -> dict[str, Any]:
    """Stored defaults, with any missing key filled from the built-in ones."""
    merged = dict(_DEFAULT_CONFIG["defaults"])
    merged.update(load_config().get("defaults", {}))
    return merged


def set_defaults(
    base_url: str | None = None,
    cluster: str | None = None,
    rpc_url: str | None = None,
    history_path: str | None = None,
) -> None:
    """Update stored defaults; None leaves a key unchanged."""
    cfg = load_config()
    defaults = cfg.setdefault("defaults", {})
    if base_url is not None:
        defaults["base_url"] = base_url
    if cluster is not None:
        defaults["cluster"] = cluster
        if rpc_url is None and cluster in CLUSTER_URLS:
            defaults["rpc_url"] = CLUSTER_URLS[cluster]
    if rpc_url is not None:
        defaults["rpc_url"] = rpc_url
    if history_path is not None:
        defaults["history_path"] = history_path
    save_config(cfg)


def history_path() -> Path:
    return Path(str(get_defaults()["history_path"])).expanduser()
