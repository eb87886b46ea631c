import socket
from types import SimpleNamespace
from unittest.mock import patch

import psutil

from core import serialports, sysinfo


def _port(device, vid=None, pid=None, manufacturer=None):
    return SimpleNamespace(device=device, vid=vid, pid=pid, manufacturer=manufacturer)


def test_usb_ports_only():
    ports = [
        _port("/dev/ttyS0"),
        _port("/dev/ttyUSB0", 0x0403, 0x6001, "FTDI"),
        _port("/dev/ttyACM0", 0x2341, 0x0043, None),
    ]
    with patch.object(serialports.list_ports, "comports", return_value=ports):
        result = serialports.list_usb_serial_ports()

    assert [p.as_dict() for p in result] == [
        {"id": 1, "label": "/dev/ttyUSB0", "description": "FTDI"},
        {"id": 2, "label": "/dev/ttyACM0", "description": "unknown"},
    ]


def test_enumeration_failure_is_empty():
    with patch.object(serialports.list_ports, "comports", side_effect=OSError("no access")):
        assert serialports.list_usb_serial_ports() == []


def test_format_memory():
    gb = 1024 ** 3
    assert sysinfo.format_memory(3 * gb // 2, 16 * gb) == "1.50 GB / 16.00 GB"


def test_snapshot_shape():
    gb = 1024 ** 3
    vm = SimpleNamespace(total=8 * gb, available=6 * gb)
    addrs = {
        "lo": [SimpleNamespace(family=socket.AF_INET, address="127.0.0.1")],
        "eth0": [SimpleNamespace(family=psutil.AF_LINK, address="AA-BB-CC-DD-EE-FF")],
    }
    with patch.object(sysinfo.psutil, "virtual_memory", return_value=vm), \
            patch.object(sysinfo.psutil, "net_if_addrs", return_value=addrs):
        snap = sysinfo.get_system_snapshot()

    assert snap.memory == "2.00 GB / 8.00 GB"
    assert snap.host == socket.gethostname()
    assert snap.name
    assert [(n.id, n.name, n.mac) for n in snap.networks] == [
        (1, "lo", ""),
        (2, "eth0", "aa:bb:cc:dd:ee:ff"),
    ]
    assert snap.as_dict()["networks"][1]["name"] == "eth0"
