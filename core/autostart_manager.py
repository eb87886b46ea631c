"""
core/autostart_manager.py

One-call autostart toggle for DeskLink.

Public API:
    set_autostart(True)   -> enable
    set_autostart(False)  -> disable
    autostart_status()    -> bool

Internally:
- Loads config.toml (defaults when missing)
- Applies the configured executable override, if any
- Calls the process-wide AutoLaunchRegistry
- Persists the requested flag to config
"""

from __future__ import annotations
from typing import Optional

from core.autolaunch import AutoLaunchRegistry, get_registry
from core.config import configured_executable, load_config, write_config
from core.logging import get_logger
from core.paths import AppPaths, get_app_paths

logger = get_logger("autostart_manager")


def registry_for(paths: AppPaths) -> AutoLaunchRegistry:
    """
    The registry to use for `paths`.

    A configured [app].executable gets the process-wide registry bound to
    that path; otherwise the one bound to the running executable.
    """
    cfg = load_config(paths.config_file)
    exe = configured_executable(cfg)
    if exe:
        return AutoLaunchRegistry.for_executable(exe)
    return get_registry()


def set_autostart(
    enabled: bool,
    paths: Optional[AppPaths] = None,
    registry: Optional[AutoLaunchRegistry] = None,
) -> None:
    """
    Enable or disable autostart and record the choice in config.toml.

    Enable failures propagate and leave the config untouched.
    """
    paths = paths or get_app_paths(ensure=False)
    registry = registry or registry_for(paths)

    registry.update(enabled)

    cfg = load_config(paths.config_file)
    cfg["autolaunch"]["enabled"] = bool(enabled)
    write_config(paths.config_file, cfg)

    state = "enabled" if enabled else "disabled"
    logger.info(f"Autostart {state} and configuration updated.")


def autostart_status(
    paths: Optional[AppPaths] = None,
    registry: Optional[AutoLaunchRegistry] = None,
) -> bool:
    paths = paths or get_app_paths(ensure=False)
    registry = registry or registry_for(paths)
    return registry.is_enabled()
