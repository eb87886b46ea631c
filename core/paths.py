"""
core/paths.py

Path resolution and provisioning for DeskLink.

Two layers:
- PathManager: an immutable path annotated with its kind (directory or
  file). Joins are only legal on directories; ensure() provisions the path
  and its ancestry on demand and is idempotent.
- get_app_paths(): the resolved per-user config/data/logs locations,
  honouring DESKLINK_DEV and DESKLINK_*_DIR overrides.

Nothing here touches the filesystem until ensure() (or ensure=True) is
asked for.
"""
from __future__ import annotations
import enum
import os
import platform
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional, Union

from platformdirs import user_config_path, user_data_path

from core.errors import (
    DataDirUnavailableError,
    InvalidJoinOnFileError,
    NonUtf8PathError,
    NotADirectoryPathError,
    NotAFilePathError,
)

StrPath = Union[str, os.PathLike]


class PathKind(enum.Enum):
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class PathManager:
    """
    Fluent path builder.

        PathManager.data_dir().join_directory("MyApp").join_file("config.json").ensure()

    Every operation returns a new value; a FILE-kind value is a leaf and
    rejects further joins.
    """
    path: Path
    kind: PathKind

    # ---------------------
    # Constructors
    # ---------------------
    @classmethod
    def as_directory(cls, path: StrPath) -> "PathManager":
        return cls(Path(path), PathKind.DIRECTORY)

    @classmethod
    def as_file(cls, path: StrPath) -> "PathManager":
        return cls(Path(path), PathKind.FILE)

    @classmethod
    def data_dir(cls) -> "PathManager":
        """The OS data root (e.g. ~/.local/share, ~/Library/Application Support)."""
        try:
            root = user_data_path(appname=None, appauthor=False, roaming=True)
        except Exception as e:
            raise DataDirUnavailableError("Cannot determine the user data directory") from e
        if not str(root):
            raise DataDirUnavailableError("Cannot determine the user data directory")
        return cls.as_directory(root)

    # ---------------------
    # Joins
    # ---------------------
    def _check_joinable(self, segment: StrPath) -> None:
        if self.kind is PathKind.FILE:
            raise InvalidJoinOnFileError(
                f"Cannot join {os.fspath(segment)!r} onto file path '{self.path}'",
                path=self.path,
            )

    def join_directory(self, segment: StrPath) -> "PathManager":
        self._check_joinable(segment)
        return replace(self, path=self.path / segment, kind=PathKind.DIRECTORY)

    def join_file(self, segment: StrPath) -> "PathManager":
        self._check_joinable(segment)
        return replace(self, path=self.path / segment, kind=PathKind.FILE)

    # ---------------------
    # Provisioning
    # ---------------------
    def ensure(self) -> "PathManager":
        """Create the path (and missing ancestors) if absent; verify its kind if present."""
        if self.kind is PathKind.DIRECTORY:
            _ensure_dir(self.path)
        else:
            _ensure_file(self.path)
        return self

    # ---------------------
    # Terminal extraction
    # ---------------------
    def into_path(self) -> Path:
        return self.path

    def into_string(self) -> str:
        text = str(self.path)
        try:
            text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise NonUtf8PathError(f"Path is not valid UTF-8: {text!r}", path=self.path) from e
        return text


def _ensure_dir(p: Path) -> Path:
    """Create a directory chain if missing. Existing directories are fine."""
    if p.exists() and not p.is_dir():
        raise NotADirectoryPathError(f"Path '{p}' exists but is not a directory", path=p)
    try:
        p.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as e:
        # A file sits on the path or on one of its ancestors
        raise NotADirectoryPathError(f"Cannot create directory '{p}': {e}", path=p) from e
    return p


def _ensure_file(p: Path) -> Path:
    """Create an empty file (and its parent chain) if missing."""
    if p.exists():
        if not p.is_file():
            raise NotAFilePathError(f"Path '{p}' exists but is not a file", path=p)
        return p

    _ensure_dir(p.parent)
    try:
        with p.open("x", encoding="utf-8"):
            pass
    except FileExistsError:
        # Created concurrently by someone else
        if not p.is_file():
            raise NotAFilePathError(f"Path '{p}' exists but is not a file", path=p)
    return p


# ---------------------------------------------------------
# Data-directory helpers
# ---------------------------------------------------------
def _data_root(root: Optional[StrPath]) -> PathManager:
    return PathManager.as_directory(root) if root is not None else PathManager.data_dir()


def data_file_path(app_name: str, filename: str, root: Optional[StrPath] = None) -> PathManager:
    """<data root>/<app_name>/<filename> as a FILE path. Not provisioned."""
    return _data_root(root).join_directory(app_name).join_file(filename)


def data_child_dir_path(
    app_name: str,
    child: Optional[str] = None,
    root: Optional[StrPath] = None,
) -> PathManager:
    """<data root>/<app_name>[/<child>] as a DIRECTORY path. Not provisioned."""
    pm = _data_root(root).join_directory(app_name)
    if child:
        pm = pm.join_directory(child)
    return pm


# ---------------------------------------------------------
# Application paths
# ---------------------------------------------------------
@dataclass
class AppPaths:
    app_name: str
    os_name: str
    home: Path
    project_root: Path
    config_dir: Path
    data_dir: Path
    logs_dir: Path

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.toml"

    def as_dict(self) -> Dict[str, str]:
        return {k: str(v) for k, v in self.__dict__.items() if isinstance(v, (Path, str))}


_DEFAULT_DEV_FOLDER = ".desklink_dev"


def _truthy_env(name: str) -> bool:
    v = os.environ.get(name)
    if not v:
        return False
    return v.strip().lower() in ("1", "true", "yes", "on")


def _expand_env_override(var: str) -> Optional[Path]:
    v = os.environ.get(var)
    if not v:
        return None
    return Path(v).expanduser().resolve()


def get_app_paths(app_name: str = "DeskLink", *, ensure: bool = False) -> AppPaths:
    """
    Resolve the per-user locations for `app_name`.

    DESKLINK_DEV=1 keeps everything under ./.desklink_dev for development.
    DESKLINK_CONFIG_DIR / DESKLINK_DATA_DIR override individual locations.
    """
    home = Path.home()
    os_name = platform.system().lower()
    project_root = Path.cwd().expanduser().resolve()

    cfg_override = _expand_env_override("DESKLINK_CONFIG_DIR")
    data_override = _expand_env_override("DESKLINK_DATA_DIR")

    if _truthy_env("DESKLINK_DEV"):
        base = project_root / _DEFAULT_DEV_FOLDER
        config_dir = cfg_override or (base / "config")
        data_dir = data_override or (base / "data")
    else:
        config_dir = cfg_override or user_config_path(appname=app_name, appauthor=False, roaming=True)
        data_dir = data_override or data_child_dir_path(app_name).into_path()

    config_dir = Path(config_dir).expanduser().resolve()
    data_dir = Path(data_dir).expanduser().resolve()
    logs_dir = data_dir / "logs"

    if ensure:
        for p in (config_dir, data_dir, logs_dir):
            PathManager.as_directory(p).ensure()

    return AppPaths(
        app_name=app_name,
        os_name=os_name,
        home=home,
        project_root=project_root,
        config_dir=config_dir,
        data_dir=data_dir,
        logs_dir=logs_dir,
    )
