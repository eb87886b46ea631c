import pytest

from autostart import AutoLaunchBackend
from core.autolaunch import AutoLaunchRegistry
from core.host_env import HostEnvironment


class FakeBackend(AutoLaunchBackend):
    """In-memory backend that mirrors the platform semantics."""

    instances = []

    def __init__(self, identity, disable_error=None, enable_error=None, query_error=None):
        super().__init__(identity)
        self.enabled = False
        self.calls = []
        self.disable_error = disable_error
        self.enable_error = enable_error
        self.query_error = query_error
        FakeBackend.instances.append(self)

    def enable(self):
        self.calls.append("enable")
        if self.enable_error:
            raise self.enable_error
        self.enabled = True

    def disable(self):
        self.calls.append("disable")
        if self.disable_error:
            raise self.disable_error
        if not self.enabled:
            raise FileNotFoundError("not registered")
        self.enabled = False

    def is_enabled(self):
        self.calls.append("is_enabled")
        if self.query_error:
            raise self.query_error
        return self.enabled


class FakeWinreg:
    """Just enough of the winreg module for the Run key."""

    HKEY_CURRENT_USER = "HKCU"
    KEY_READ = 1
    KEY_SET_VALUE = 2
    REG_SZ = 1

    class _Key:
        def __init__(self, store):
            self.store = store

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    def __init__(self):
        self.keys = {}

    def CreateKeyEx(self, root, sub_key, reserved=0, access=KEY_SET_VALUE):
        return self._Key(self.keys.setdefault((root, sub_key), {}))

    def OpenKey(self, root, sub_key, reserved=0, access=KEY_READ):
        if (root, sub_key) not in self.keys:
            raise FileNotFoundError(sub_key)
        return self._Key(self.keys[(root, sub_key)])

    def SetValueEx(self, key, name, reserved, kind, value):
        key.store[name] = (value, kind)

    def DeleteValue(self, key, name):
        if name not in key.store:
            raise FileNotFoundError(name)
        del key.store[name]

    def QueryValueEx(self, key, name):
        if name not in key.store:
            raise FileNotFoundError(name)
        return key.store[name]


@pytest.fixture
def fake_backend_factory():
    FakeBackend.instances = []
    return lambda identity, os_name: FakeBackend(identity)


@pytest.fixture
def registry(fake_backend_factory):
    return AutoLaunchRegistry(
        executable=lambda: "/opt/tools/desklink",
        os_name="linux",
        host_env=HostEnvironment(),
        backend_factory=fake_backend_factory,
    )


@pytest.fixture
def fake_winreg():
    return FakeWinreg()


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.delenv("APPIMAGE", raising=False)
    monkeypatch.delenv("DESKLINK_DEV", raising=False)
    monkeypatch.delenv("DESKLINK_CONFIG_DIR", raising=False)
    monkeypatch.delenv("DESKLINK_DATA_DIR", raising=False)
    return home
