"""
autostart/linux.py

Linux autostart integration using XDG Autostart specification.

Creates and removes $XDG_CONFIG_HOME/autostart/<app_name>.desktop
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Optional

from core.identity import Identity
from core.logging import get_logger

from . import AutoLaunchBackend

logger = get_logger("autostart.linux")

DESKTOP_TEMPLATE = """[Desktop Entry]
Type=Application
Version=1.0
Name={app_name}
Comment={app_name} startup script
Exec={exec_cmd}
StartupNotify=false
Terminal=false
X-GNOME-Autostart-enabled=true
"""


def _autostart_dir() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / "autostart"


# Desktop Entry spec, "The Exec key"
_RESERVED_CHARS = frozenset(" \t\n\"'\\><~|&;$*?#()`")
_QUOTED_ESCAPES = frozenset('"`$\\')


def _exec_value(app_path: str) -> str:
    """
    Render app_path as the Exec program argument.

    '%' is doubled (field codes). Paths with reserved characters are
    double-quoted, with '"', '`', '$' and '\\' backslash-escaped inside the
    quotes; the string-value escaping then doubles every backslash, so a
    literal '$' ends up as '\\\\$' in the file.
    """
    value = app_path.replace("%", "%%")
    if not any(c in _RESERVED_CHARS for c in value):
        return value
    quoted = "".join("\\" + c if c in _QUOTED_ESCAPES else c for c in value)
    return '"' + quoted.replace("\\", "\\\\") + '"'


class LinuxAutoLaunch(AutoLaunchBackend):
    def __init__(self, identity: Identity, autostart_dir: Optional[Path] = None):
        super().__init__(identity)
        self.autostart_dir = Path(autostart_dir) if autostart_dir else _autostart_dir()

    @property
    def desktop_file(self) -> Path:
        return self.autostart_dir / f"{self.app_name}.desktop"

    def desktop_content(self) -> str:
        return DESKTOP_TEMPLATE.format(
            app_name=self.app_name,
            exec_cmd=_exec_value(self.app_path),
        )

    def enable(self) -> None:
        """
        Enable autostart on Linux using .desktop file.
        """
        self.autostart_dir.mkdir(parents=True, exist_ok=True)

        desktop_path = self.desktop_file
        with desktop_path.open("w", encoding="utf-8") as f:
            f.write(self.desktop_content())

        # Ensure readable
        os.chmod(desktop_path, 0o644)

        logger.info("Linux autostart enabled", extra={"meta": {"path": str(desktop_path)}})

    def disable(self) -> None:
        """
        Remove the .desktop file. Raises FileNotFoundError if it is absent.
        """
        desktop_path = self.desktop_file
        desktop_path.unlink()
        logger.info("Linux autostart removed", extra={"meta": {"path": str(desktop_path)}})

    def is_enabled(self) -> bool:
        return self.desktop_file.is_file()
