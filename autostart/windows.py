"""
autostart/windows.py

Windows autostart integration using the per-user Run key.

Writes and removes the value <app_name> under:
HKEY_CURRENT_USER\\Software\\Microsoft\\Windows\\CurrentVersion\\Run
"""

from __future__ import annotations

from core.identity import Identity
from core.logging import get_logger

from . import AutoLaunchBackend

logger = get_logger("autostart.windows")

RUN_KEY = r"Software\Microsoft\Windows\CurrentVersion\Run"


def _load_winreg():
    import winreg  # type: ignore[import-not-found]
    return winreg


class WindowsAutoLaunch(AutoLaunchBackend):
    def __init__(self, identity: Identity, winreg=None, run_key: str = RUN_KEY):
        super().__init__(identity)
        self._winreg = winreg
        self.run_key = run_key

    @property
    def winreg(self):
        if self._winreg is None:
            self._winreg = _load_winreg()
        return self._winreg

    def enable(self) -> None:
        """
        Enable Windows autostart by writing the quoted app path to the Run key.
        """
        reg = self.winreg
        with reg.CreateKeyEx(reg.HKEY_CURRENT_USER, self.run_key, 0, reg.KEY_SET_VALUE) as key:
            reg.SetValueEx(key, self.app_name, 0, reg.REG_SZ, self.app_path)
        logger.info("Windows autostart enabled", extra={"meta": {"value": self.app_name}})

    def disable(self) -> None:
        """
        Delete the Run value. Raises FileNotFoundError if it does not exist.
        """
        reg = self.winreg
        with reg.OpenKey(reg.HKEY_CURRENT_USER, self.run_key, 0, reg.KEY_SET_VALUE) as key:
            reg.DeleteValue(key, self.app_name)
        logger.info("Windows autostart removed", extra={"meta": {"value": self.app_name}})

    def is_enabled(self) -> bool:
        reg = self.winreg
        try:
            with reg.OpenKey(reg.HKEY_CURRENT_USER, self.run_key, 0, reg.KEY_READ) as key:
                value, _ = reg.QueryValueEx(key, self.app_name)
        except FileNotFoundError:
            return False
        return value == self.app_path
