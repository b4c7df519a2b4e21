from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import tomli_w

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib

# Config location: ~/.sicpctl/config.toml  (override with SICPCTL_CONFIG_FILE if needed)
CONFIG_FILE = Path(os.environ.get("SICPCTL_CONFIG_FILE", Path.home() / ".sicpctl" / "config.toml"))


def _ensure_parent() -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)


def load_config() -> Dict[str, Any]:
    if CONFIG_FILE.exists():
        with CONFIG_FILE.open("rb") as f:
            return tomllib.load(f)
    return {}


def save_config(cfg: Dict[str, Any]) -> None:
    _ensure_parent()
    with CONFIG_FILE.open("wb") as f:
        tomli_w.dump(cfg, f)


def _get_serial(key: str) -> Any:
    return load_config().get("serial", {}).get(key)


def _set_serial(key: str, value: Any) -> None:
    cfg = load_config()
    cfg.setdefault("serial", {})[key] = value
    save_config(cfg)


def get_default_port() -> Optional[str]:
    return _get_serial("port")


def set_default_port(port: str) -> None:
    _set_serial("port", port)


def get_default_speed() -> Optional[int]:
    return _get_serial("speed")


def set_default_speed(speed: int) -> None:
    _set_serial("speed", speed)


def clear_defaults() -> bool:
    """Drop the [serial] section. Returns False when there was nothing to drop."""
    cfg = load_config()
    if not cfg.get("serial"):
        return False
    del cfg["serial"]
    save_config(cfg)
    return True
