# core/host_env.py
"""
Host application environment.

Linux builds may run from an AppImage. The AppImage runtime mounts the image
and exports the path of the original .AppImage file in $APPIMAGE; that file,
not the mounted binary, is what must be registered for auto-launch.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class HostEnvironment:
    appimage: Optional[str] = None

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "HostEnvironment":
        env = os.environ if environ is None else environ
        appimage = env.get("APPIMAGE") or None
        return cls(appimage=appimage)
