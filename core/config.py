# core/config.py
"""
Configuration management for DeskLink.

Responsibilities:
- Define default configuration
- Load config.toml if it exists (defaults merged underneath)
- Validate values
- Write config atomically

This module MUST NOT:
- Register or remove autostart entries
- Create data directories other than the config file's parent
"""
from __future__ import annotations

import copy
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # fallback

import tomli_w


DEFAULT_CONFIG: Dict[str, Any] = {
    "app": {
        "name": "DeskLink",
        # Empty = the running executable
        "executable": "",
    },
    "autolaunch": {
        # Last state requested through DeskLink
        "enabled": False,
    },
    "logging": {
        "console": True,
        "level": "INFO",
    },
}

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------
def _expand_path(p: str) -> str:
    """Expand ~ and environment variables and return absolute path."""
    return str(Path(os.path.expandvars(os.path.expanduser(p))).resolve())


def _deep_merge(default: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override onto a copy of default recursively."""
    result = copy.deepcopy(default)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _validate(cfg: Dict[str, Any]) -> None:
    """Validate and normalize settings in-place."""
    app = cfg["app"]
    name = app.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError("app.name must be a non-empty string")
    app["name"] = name.strip()

    exe = app.get("executable") or ""
    if not isinstance(exe, str):
        raise ValueError("app.executable must be a string path")
    app["executable"] = _expand_path(exe) if exe else ""

    enabled = cfg["autolaunch"].get("enabled")
    if not isinstance(enabled, bool):
        raise ValueError("autolaunch.enabled must be true or false")

    log = cfg["logging"]
    if not isinstance(log.get("console"), bool):
        raise ValueError("logging.console must be true or false")
    level = str(log.get("level", "INFO")).upper()
    if level not in _LEVELS:
        raise ValueError(f"logging.level must be one of {', '.join(_LEVELS)}")
    log["level"] = level


# ---------------------------------------------------------
# Public API
# ---------------------------------------------------------
def default_config() -> Dict[str, Any]:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    _validate(cfg)
    return cfg


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load config.toml from disk.
    Returns merged config (defaults + user overrides).
    Does NOT write to disk.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        return default_config()

    with config_path.open("rb") as f:
        user_cfg = tomllib.load(f)

    cfg = _deep_merge(DEFAULT_CONFIG, user_cfg)
    _validate(cfg)
    return cfg


def write_config(config_path: Path, cfg: Dict[str, Any]) -> None:
    """
    Write config.toml atomically.
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        dir=str(config_path.parent), prefix=".config.", suffix=".toml"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(tomli_w.dumps(cfg).encode("utf-8"))
            f.flush()
            os.fsync(f.fileno())
        Path(tmp_name).replace(config_path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


def ensure_config(config_dir: Path) -> Dict[str, Any]:
    """
    Ensure config.toml exists in config_dir.
    If missing → create with defaults.
    Returns loaded config dict.
    """
    config_path = Path(config_dir) / "config.toml"
    if not config_path.exists():
        cfg = default_config()
        write_config(config_path, cfg)
        return cfg
    return load_config(config_path)


def log_level(cfg: Dict[str, Any]) -> int:
    return logging.getLevelName(cfg["logging"]["level"])


def configured_executable(cfg: Dict[str, Any]) -> Optional[str]:
    return cfg["app"].get("executable") or None
