# core/identity.py
"""
Platform identity for the running executable.

An Identity is the (app_name, app_path) pair handed to the OS auto-launch
mechanism. The executable path is always injected so the derivation rules
can be exercised for any platform from any platform:

    windows -> the absolute path wrapped in one pair of double quotes
    darwin  -> the enclosing Foo.app bundle (three levels up), else raw path
    linux   -> the AppImage file when running from one, else raw path
"""
from __future__ import annotations
import os
import platform
import sys
from dataclasses import dataclass
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath
from typing import Optional, Union

from core.errors import InvalidEncodingError, NoFileStemError
from core.host_env import HostEnvironment

PathLike = Union[str, bytes, os.PathLike]

_BUNDLE_SUFFIX = ".app"
# Foo.app/Contents/MacOS/foo
_BUNDLE_DEPTH = 3


@dataclass(frozen=True)
class Identity:
    app_name: str
    app_path: str


def current_os() -> str:
    return platform.system().lower()


def current_executable() -> Path:
    """
    Path of the running program.

    Frozen builds (PyInstaller and friends) are their own executable. From
    source, the entry script is what gets relaunched, not the interpreter.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    entry = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if entry is not None and entry.is_file():
        return entry.resolve()
    return Path(sys.executable).resolve()


def _as_text(executable_path: PathLike) -> str:
    raw = os.fspath(executable_path)
    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncodingError(f"Executable path is not valid text: {raw!r}") from e
    try:
        # surrogateescape'd bytes from the filesystem cannot be encoded back
        raw.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidEncodingError(f"Executable path is not valid text: {raw!r}") from e
    return raw


def _pure_path(text: str, os_name: str) -> PurePath:
    if os_name == "windows":
        return PureWindowsPath(text)
    return PurePosixPath(text)


def bundle_root(executable_path: str) -> Optional[str]:
    """
    Return the enclosing .app bundle of a macOS executable, or None.

    Only the exact Contents/MacOS layout is recognised, so a helper bundle
    nested inside another bundle resolves to the helper itself.
    """
    parents = PurePosixPath(executable_path).parents
    if len(parents) < _BUNDLE_DEPTH:
        return None
    candidate = parents[_BUNDLE_DEPTH - 1]
    if candidate.suffix != _BUNDLE_SUFFIX:
        return None
    return str(candidate)


def quote_windows_path(path: str) -> str:
    return '"' + path.strip('"') + '"'


def resolve_identity(
    executable_path: PathLike,
    os_name: Optional[str] = None,
    host_env: Optional[HostEnvironment] = None,
) -> Identity:
    """
    Derive the auto-launch Identity for `executable_path` on `os_name`.

    Raises:
      NoFileStemError if the path has no base name.
      InvalidEncodingError if the path cannot be represented as text.
    """
    os_name = (os_name or current_os()).lower()
    text = _as_text(executable_path)

    app_name = _pure_path(text.strip('"'), os_name).stem if text else ""
    if not app_name:
        raise NoFileStemError(f"Cannot determine application name from {text!r}")

    if os_name == "windows":
        app_path = quote_windows_path(text)
    elif os_name == "darwin":
        app_path = bundle_root(text) or text
    elif os_name == "linux":
        env = host_env if host_env is not None else HostEnvironment.from_environ()
        app_path = env.appimage or text
    else:
        app_path = text

    return Identity(app_name=app_name, app_path=app_path)
