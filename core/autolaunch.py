# core/autolaunch.py
"""
Process-wide auto-launch registry.

Public API:
    registry = get_registry()
    registry.enable()        # register for launch at login, errors surface
    registry.disable()       # deregister, platform errors are logged and dropped
    registry.is_enabled()    # query the platform state

Behavior:
- The platform handle is built lazily on first use: the executable's
  Identity is resolved, the OS backend is constructed and cached.
- Concurrent first callers may each build a handle; only the first one to
  be installed is kept and every caller converges on it.
- enable/disable are serialized through the registry lock. Queries only
  need the handle and may run side by side.
- disable() deliberately ignores failures of the deregistration call so a
  defensive "make sure auto-launch is off" at startup never fails because
  nothing was registered.
"""
from __future__ import annotations
import enum
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from autostart import AutoLaunchBackend, create_backend
from core.errors import DeskLinkError, RegistryError
from core.host_env import HostEnvironment
from core.identity import Identity, current_executable, current_os, resolve_identity
from core.logging import LogContext, get_logger

logger = get_logger("autolaunch")

ExecutableProvider = Callable[[], Union[str, Path]]
BackendFactory = Callable[[Identity, str], AutoLaunchBackend]


class RegistryState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


def _default_backend_factory(identity: Identity, os_name: str) -> AutoLaunchBackend:
    return create_backend(identity, os_name)


class AutoLaunchRegistry:
    """
    Owner of the single auto-launch handle.

    Usage:
        registry = AutoLaunchRegistry.global_registry()
        registry.enable()

    Tests build private instances with injected collaborators:
        AutoLaunchRegistry(executable=lambda: "/opt/app/app", os_name="linux",
                           backend_factory=lambda ident, os_name: FakeBackend(ident))
    """

    _global: Optional["AutoLaunchRegistry"] = None
    _by_executable: Dict[str, "AutoLaunchRegistry"] = {}
    _global_lock = threading.Lock()

    def __init__(
        self,
        executable: Optional[ExecutableProvider] = None,
        os_name: Optional[str] = None,
        host_env: Optional[HostEnvironment] = None,
        backend_factory: Optional[BackendFactory] = None,
    ):
        self._executable = executable or current_executable
        self._os_name = (os_name or current_os()).lower()
        self._host_env = host_env
        self._backend_factory = backend_factory or _default_backend_factory

        self._lock = threading.Lock()
        self._handle: Optional[AutoLaunchBackend] = None
        self._identity: Optional[Identity] = None
        self._initializing = 0

    # ---------------------
    # Singleton
    # ---------------------
    @classmethod
    def global_registry(cls) -> "AutoLaunchRegistry":
        """Return the process-wide registry, creating it on first call."""
        if cls._global is None:
            with cls._global_lock:
                if cls._global is None:
                    cls._global = cls()
        return cls._global

    @classmethod
    def for_executable(cls, executable: Union[str, Path]) -> "AutoLaunchRegistry":
        """
        Return the process-wide registry bound to a fixed executable path.

        One instance per path, so a configured override resolves its
        Identity once and keeps a single handle like the global registry.
        """
        key = str(executable)
        with cls._global_lock:
            registry = cls._by_executable.get(key)
            if registry is None:
                registry = cls(executable=lambda: key)
                cls._by_executable[key] = registry
            return registry

    # ---------------------
    # State
    # ---------------------
    @property
    def state(self) -> RegistryState:
        with self._lock:
            if self._handle is not None:
                return RegistryState.READY
            if self._initializing:
                return RegistryState.INITIALIZING
            return RegistryState.UNINITIALIZED

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def os_name(self) -> str:
        return self._os_name

    def _build_handle(self) -> AutoLaunchBackend:
        identity = resolve_identity(self._executable(), self._os_name, self._host_env)
        logger.debug(
            "Resolved auto-launch identity",
            extra={"meta": {"app_name": identity.app_name, "app_path": identity.app_path}},
        )
        return self._backend_factory(identity, self._os_name)

    def ensure_ready(self) -> AutoLaunchBackend:
        """
        Return the cached handle, building and installing it on first use.

        The handle is built outside the lock; if another thread installed
        one in the meantime, the freshly built handle is discarded.
        """
        with self._lock:
            if self._handle is not None:
                return self._handle
            self._initializing += 1

        try:
            candidate = self._build_handle()
        except Exception:
            with self._lock:
                self._initializing -= 1
            raise

        with self._lock:
            self._initializing -= 1
            if self._handle is None:
                self._handle = candidate
                self._identity = candidate.identity
                logger.info(
                    "Auto-launch handle installed",
                    extra={"meta": {"backend": type(candidate).__name__, "app_name": candidate.app_name}},
                )
            else:
                logger.debug("Discarding redundant auto-launch handle")
            return self._handle

    # ---------------------
    # Operations
    # ---------------------
    def enable(self) -> None:
        """
        Register for launch at login.

        Platform failures that are not DeskLinkErrors (PermissionError,
        OSError from the registry or filesystem) are raised as RegistryError
        with the original exception on __cause__.
        """
        handle = self.ensure_ready()
        with LogContext(op="enable"), self._lock:
            try:
                handle.enable()
            except DeskLinkError:
                raise
            except Exception as e:
                logger.error("Failed to enable auto-launch", exc_info=True)
                raise RegistryError(f"Failed to enable auto-launch: {e}") from e

    def disable(self) -> None:
        handle = self.ensure_ready()
        with LogContext(op="disable"), self._lock:
            try:
                handle.disable()
            except Exception as e:
                # Not registered (or already removed) is not an application error
                logger.warning(
                    "Ignoring auto-launch disable failure",
                    extra={"meta": {"error": repr(e)}},
                )

    def is_enabled(self) -> bool:
        handle = self.ensure_ready()
        try:
            return bool(handle.is_enabled())
        except DeskLinkError:
            raise
        except Exception as e:
            with LogContext(op="is_enabled"):
                logger.error("Failed to query auto-launch state", exc_info=True)
            raise RegistryError(f"Failed to query auto-launch state: {e}") from e

    def update(self, enabled: bool) -> None:
        if enabled:
            self.enable()
        else:
            self.disable()


def get_registry() -> AutoLaunchRegistry:
    return AutoLaunchRegistry.global_registry()
