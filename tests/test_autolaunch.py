import threading
import time

import pytest

from core.autolaunch import AutoLaunchRegistry, RegistryState, get_registry
from core.errors import NoFileStemError, RegistryError
from core.host_env import HostEnvironment
from core.identity import Identity
from tests.conftest import FakeBackend


def test_global_registry_is_singleton():
    assert AutoLaunchRegistry.global_registry() is AutoLaunchRegistry.global_registry()
    assert get_registry() is AutoLaunchRegistry.global_registry()


def test_lazy_initialization(registry):
    assert registry.state is RegistryState.UNINITIALIZED
    assert registry.identity is None
    assert FakeBackend.instances == []

    handle = registry.ensure_ready()

    assert registry.state is RegistryState.READY
    assert registry.identity == Identity("desklink", "/opt/tools/desklink")
    assert handle is registry.ensure_ready()
    assert len(FakeBackend.instances) == 1


def test_identity_resolved_once(fake_backend_factory):
    calls = []

    def exe():
        calls.append(1)
        return "/usr/bin/app"

    reg = AutoLaunchRegistry(executable=exe, os_name="linux",
                             host_env=HostEnvironment(), backend_factory=fake_backend_factory)
    reg.enable()
    reg.disable()
    reg.is_enabled()
    assert len(calls) == 1


def test_enable_twice_succeeds(registry):
    registry.enable()
    registry.enable()
    assert registry.is_enabled() is True
    assert FakeBackend.instances[0].calls.count("enable") == 2


def test_disable_when_never_enabled_is_silent(registry, caplog):
    with caplog.at_level("WARNING", logger="desklink.autolaunch"):
        registry.disable()
    assert registry.is_enabled() is False
    assert "Ignoring auto-launch disable failure" in caplog.text


def test_disable_after_enable(registry):
    registry.enable()
    registry.disable()
    assert registry.is_enabled() is False


def test_disable_swallows_any_platform_error():
    reg = AutoLaunchRegistry(
        executable=lambda: "/usr/bin/app", os_name="linux",
        backend_factory=lambda ident, os_name: FakeBackend(ident, disable_error=PermissionError("denied")),
    )
    reg.disable()


def test_disable_propagates_resolution_errors(fake_backend_factory):
    reg = AutoLaunchRegistry(executable=lambda: "/", os_name="linux", backend_factory=fake_backend_factory)
    with pytest.raises(NoFileStemError):
        reg.disable()
    assert reg.state is RegistryState.UNINITIALIZED


def test_enable_surfaces_platform_error():
    reg = AutoLaunchRegistry(
        executable=lambda: "/usr/bin/app", os_name="linux",
        backend_factory=lambda ident, os_name: FakeBackend(ident, enable_error=PermissionError("denied")),
    )
    with pytest.raises(RegistryError) as exc:
        reg.enable()
    assert isinstance(exc.value.__cause__, PermissionError)


def test_is_enabled_surfaces_query_error():
    reg = AutoLaunchRegistry(
        executable=lambda: "/usr/bin/app", os_name="linux",
        backend_factory=lambda ident, os_name: FakeBackend(ident, query_error=OSError("boom")),
    )
    with pytest.raises(RegistryError):
        reg.is_enabled()


def test_backend_factory_failure_propagates():
    def factory(ident, os_name):
        raise RegistryError("unsupported")

    reg = AutoLaunchRegistry(executable=lambda: "/usr/bin/app", os_name="linux", backend_factory=factory)
    with pytest.raises(RegistryError):
        reg.enable()
    assert reg.state is RegistryState.UNINITIALIZED


def test_update_dispatches(registry):
    registry.update(True)
    assert registry.is_enabled()
    registry.update(False)
    assert not registry.is_enabled()


def test_os_name_passed_to_factory():
    seen = []

    def factory(ident, os_name):
        seen.append((ident, os_name))
        return FakeBackend(ident)

    reg = AutoLaunchRegistry(executable=lambda: r"C:\Apps\tool.exe", os_name="Windows", backend_factory=factory)
    reg.ensure_ready()
    assert seen == [(Identity("tool", '"C:\\Apps\\tool.exe"'), "windows")]


def test_concurrent_first_use_converges():
    n = 8
    barrier = threading.Barrier(n)
    built = []

    def factory(ident, os_name):
        backend = FakeBackend(ident)
        built.append(backend)
        # widen the race window
        time.sleep(0.01)
        return backend

    reg = AutoLaunchRegistry(executable=lambda: "/usr/bin/app", os_name="linux", backend_factory=factory)
    handles = []
    errors = []

    def worker():
        barrier.wait()
        try:
            handles.append(reg.ensure_ready())
            reg.enable()
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(handles) == n
    assert all(h is handles[0] for h in handles)
    assert reg.ensure_ready() is handles[0]
    assert handles[0].calls.count("enable") == n
    assert all(not b.calls for b in built if b is not handles[0])
