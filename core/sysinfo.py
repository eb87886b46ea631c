# core/sysinfo.py
"""
System snapshot: OS name/version, host name, memory usage and network
interfaces with their MAC addresses. Backed by psutil.
"""
from __future__ import annotations
import platform
import socket
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

import psutil

GB_IN_BYTES = 1024 ** 3


@dataclass(frozen=True)
class NetworkInterface:
    id: int
    name: str
    mac: str


@dataclass(frozen=True)
class SystemSnapshot:
    name: str
    version: str
    host: str
    memory: str
    networks: List[NetworkInterface] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def format_memory(used_bytes: int, total_bytes: int) -> str:
    return f"{used_bytes / GB_IN_BYTES:.2f} GB / {total_bytes / GB_IN_BYTES:.2f} GB"


def _mac_address(addrs) -> str:
    for addr in addrs:
        if addr.family == psutil.AF_LINK and addr.address:
            return addr.address.replace("-", ":").lower()
    return ""


def list_network_interfaces() -> List[NetworkInterface]:
    """Interfaces in enumeration order, numbered from 1."""
    return [
        NetworkInterface(id=i, name=name, mac=_mac_address(addrs))
        for i, (name, addrs) in enumerate(psutil.net_if_addrs().items(), start=1)
    ]


def _os_version() -> str:
    system = platform.system()
    if system == "Darwin":
        return platform.mac_ver()[0] or platform.release()
    if system == "Windows":
        return platform.version()
    return platform.release()


def get_system_snapshot() -> SystemSnapshot:
    vm = psutil.virtual_memory()
    return SystemSnapshot(
        name=platform.system(),
        version=_os_version(),
        host=socket.gethostname(),
        memory=format_memory(vm.total - vm.available, vm.total),
        networks=list_network_interfaces(),
    )
