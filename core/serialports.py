# core/serialports.py
"""
USB serial port enumeration.

A thin query over pyserial; ports that are not USB devices are skipped.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from serial.tools import list_ports

from core.logging import get_logger

logger = get_logger("serialports")

UNKNOWN_MANUFACTURER = "unknown"


@dataclass(frozen=True)
class PortInfo:
    id: int
    label: str
    description: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_usb(port) -> bool:
    # pyserial only fills vid/pid for USB-attached devices
    return port.vid is not None and port.pid is not None


def list_usb_serial_ports() -> List[PortInfo]:
    """
    Enumerate USB serial ports.

    `id` is the port's position in the full enumeration (non-USB ports
    included), so ids are stable for a given hardware set.
    """
    try:
        ports = list_ports.comports()
    except OSError:
        logger.warning("Serial port enumeration failed", exc_info=True)
        return []

    result: List[PortInfo] = []
    for index, port in enumerate(ports):
        if not _is_usb(port):
            continue
        result.append(PortInfo(
            id=index,
            label=port.device,
            description=port.manufacturer or UNKNOWN_MANUFACTURER,
        ))
    return result
