import pytest
import tomli_w

import core.autostart_manager as manager
from core.autolaunch import get_registry
from core.config import load_config
from core.errors import RegistryError
from core.paths import get_app_paths
from tests.conftest import FakeBackend


@pytest.fixture
def paths(tmp_path, monkeypatch, isolated_home):
    monkeypatch.setenv("DESKLINK_CONFIG_DIR", str(tmp_path / "cfg"))
    monkeypatch.setenv("DESKLINK_DATA_DIR", str(tmp_path / "data"))
    return get_app_paths("DeskLink")


def test_enable_persists_flag(paths, registry):
    manager.set_autostart(True, paths, registry)
    assert registry.is_enabled()
    assert load_config(paths.config_file)["autolaunch"]["enabled"] is True
    assert manager.autostart_status(paths, registry) is True


def test_disable_without_prior_enable(paths, registry):
    manager.set_autostart(False, paths, registry)
    assert load_config(paths.config_file)["autolaunch"]["enabled"] is False
    assert manager.autostart_status(paths, registry) is False


def test_enable_failure_leaves_config_untouched(paths):
    from core.autolaunch import AutoLaunchRegistry

    reg = AutoLaunchRegistry(
        executable=lambda: "/usr/bin/app", os_name="linux",
        backend_factory=lambda ident, os_name: FakeBackend(ident, enable_error=PermissionError("no")),
    )
    with pytest.raises(RegistryError):
        manager.set_autostart(True, paths, reg)
    assert not paths.config_file.exists()


def test_registry_for_uses_global_by_default(paths):
    assert manager.registry_for(paths) is get_registry()


def test_registry_for_configured_executable(paths, tmp_path):
    paths.config_file.parent.mkdir(parents=True)
    paths.config_file.write_bytes(tomli_w.dumps({"app": {"executable": str(tmp_path / "tool")}}).encode())
    reg = manager.registry_for(paths)
    assert reg is not get_registry()


def test_configured_executable_shares_one_registry(paths, tmp_path):
    paths.config_file.parent.mkdir(parents=True)
    paths.config_file.write_bytes(tomli_w.dumps({"app": {"executable": str(tmp_path / "tool")}}).encode())

    first = manager.registry_for(paths)
    assert manager.registry_for(paths) is first
    assert first is manager.AutoLaunchRegistry.for_executable(str((tmp_path / "tool").resolve()))
