# __init__.py AUTOSTART
"""
Platform auto-launch mechanisms.

Each backend is bound to one Identity and exposes the same three calls:
enable(), disable(), is_enabled(). The concrete class is picked once from
the OS name; callers never branch on the platform themselves.
"""
from __future__ import annotations
from typing import Optional

from core.errors import UnsupportedPlatformError
from core.identity import Identity, current_os


class AutoLaunchBackend:
    """Common interface for the Windows, macOS and Linux mechanisms."""

    def __init__(self, identity: Identity):
        self.identity = identity

    @property
    def app_name(self) -> str:
        return self.identity.app_name

    @property
    def app_path(self) -> str:
        return self.identity.app_path

    def enable(self) -> None:
        raise NotImplementedError

    def disable(self) -> None:
        raise NotImplementedError

    def is_enabled(self) -> bool:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(app_name={self.app_name!r}, app_path={self.app_path!r})"


def backend_class(os_name: Optional[str] = None):
    system = (os_name or current_os()).lower()
    if system == "linux":
        from .linux import LinuxAutoLaunch as cls
    elif system == "windows":
        from .windows import WindowsAutoLaunch as cls
    elif system == "darwin":
        from .macos import MacAutoLaunch as cls
    else:
        raise UnsupportedPlatformError(f"Autostart not supported on this OS: {system}")
    return cls


def create_backend(identity: Identity, os_name: Optional[str] = None, **kwargs) -> AutoLaunchBackend:
    """Build the auto-launch backend for `os_name` (default: this OS)."""
    return backend_class(os_name)(identity, **kwargs)
