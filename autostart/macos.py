"""
autostart/macos.py

macOS autostart integration using a per-user LaunchAgent.

Creates and removes ~/Library/LaunchAgents/<app_name>.plist
"""

from __future__ import annotations
import plistlib
from pathlib import Path
from typing import List, Optional

from core.identity import Identity
from core.logging import get_logger

from . import AutoLaunchBackend

logger = get_logger("autostart.macos")


def _launch_agents_dir() -> Path:
    return Path.home() / "Library" / "LaunchAgents"


class MacAutoLaunch(AutoLaunchBackend):
    def __init__(self, identity: Identity, launch_agents_dir: Optional[Path] = None):
        super().__init__(identity)
        self.launch_agents_dir = Path(launch_agents_dir) if launch_agents_dir else _launch_agents_dir()

    @property
    def plist_file(self) -> Path:
        return self.launch_agents_dir / f"{self.app_name}.plist"

    def program_arguments(self) -> List[str]:
        # A bundle is a directory; it has to go through LaunchServices
        if self.app_path.endswith(".app"):
            return ["/usr/bin/open", "-a", self.app_path]
        return [self.app_path]

    def plist_payload(self) -> dict:
        return {
            "Label": self.app_name,
            "ProgramArguments": self.program_arguments(),
            "RunAtLoad": True,
        }

    def enable(self) -> None:
        self.launch_agents_dir.mkdir(parents=True, exist_ok=True)
        plist_path = self.plist_file
        with plist_path.open("wb") as f:
            plistlib.dump(self.plist_payload(), f)
        logger.info("macOS autostart enabled", extra={"meta": {"path": str(plist_path)}})

    def disable(self) -> None:
        """Remove the LaunchAgent. Raises FileNotFoundError if it is absent."""
        plist_path = self.plist_file
        plist_path.unlink()
        logger.info("macOS autostart removed", extra={"meta": {"path": str(plist_path)}})

    def is_enabled(self) -> bool:
        return self.plist_file.is_file()
