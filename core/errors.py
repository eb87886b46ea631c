# core/errors.py
"""
Exception hierarchy for DeskLink.

Every failure the library reports on purpose derives from DeskLinkError so
the CLI can map it to a clean exit code instead of a crash.
"""
from __future__ import annotations


class DeskLinkError(Exception):
    """Base class for all expected DeskLink failures."""


# ---------------------------------------------------------
# Identity
# ---------------------------------------------------------
class IdentityError(DeskLinkError):
    """The running executable's name or path could not be resolved."""


class NoFileStemError(IdentityError):
    pass


class InvalidEncodingError(IdentityError):
    pass


# ---------------------------------------------------------
# Auto-launch registry
# ---------------------------------------------------------
class RegistryError(DeskLinkError):
    """A platform auto-launch call failed during enable or query."""


class UnsupportedPlatformError(RegistryError):
    pass


# ---------------------------------------------------------
# Paths
# ---------------------------------------------------------
class PathError(DeskLinkError):
    """Base class for PathManager failures."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class InvalidJoinOnFileError(PathError):
    pass


class NotADirectoryPathError(PathError):
    pass


class NotAFilePathError(PathError):
    pass


class NonUtf8PathError(PathError):
    pass


class DataDirUnavailableError(PathError):
    pass
