"""
Device Schema Types
===================

Bounded Context: Shared Device Vocabulary

Product type codes reported by the WMS stick, and the enumerated payloads
the bridge publishes for devices.

Types:
- DeviceType: WMS product class codes
- MotionState: values of ``warema/<snr>/state``
"""

from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Optional


class DeviceType(IntEnum):
    """WMS product class codes as reported in scan results."""

    WEATHER_STATION_ECO = 6
    REMOTE_PRO = 7
    WEBCONTROL_PRO = 9
    PLUG_RECEIVER = 20
    ACTUATOR_UP = 21
    SMART_SOCKET = 24
    RADIO_MOTOR = 25


DEFAULT_DEVICE_TYPE = DeviceType.RADIO_MOTOR

MODEL_NAMES: Dict[DeviceType, str] = {
    DeviceType.WEATHER_STATION_ECO: "Weather station eco",
    DeviceType.PLUG_RECEIVER: "Plug receiver",
    DeviceType.ACTUATOR_UP: "Actuator UP",
    DeviceType.SMART_SOCKET: "Smart socket",
    DeviceType.RADIO_MOTOR: "Radio motor",
}

# Part of the network, but nothing the bridge exposes.
IGNORED_TYPES: FrozenSet[DeviceType] = frozenset({
    DeviceType.REMOTE_PRO,
    DeviceType.WEBCONTROL_PRO,
})

# Types driven through the stick's blind primitives.
COVER_TYPES: FrozenSet[DeviceType] = frozenset({
    DeviceType.PLUG_RECEIVER,
    DeviceType.ACTUATOR_UP,
    DeviceType.SMART_SOCKET,
    DeviceType.RADIO_MOTOR,
})


class MotionState(str, Enum):
    """Motion labels published on ``warema/<snr>/state``."""

    OPENING = "opening"
    CLOSING = "closing"
    OPEN = "open"
    CLOSED = "closed"
    STOPPED = "stopped"


def lookup_device_type(code: int) -> Optional[DeviceType]:
    """Map a raw type code to DeviceType, None when the code is unknown."""
    try:
        return DeviceType(int(code))
    except (TypeError, ValueError):
        return None


POSITION_MIN = 0
POSITION_MAX = 100
ANGLE_MIN = -100
ANGLE_MAX = 100


def _bounded_int(value, low: int, high: int, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not number.is_integer():
        raise ValueError(f"{name} must be an integer, got {value!r}")
    number = int(number)
    if not low <= number <= high:
        raise ValueError(f"{name} must be in [{low}, {high}], got {number}")
    return number


def parse_position(value) -> int:
    """Coerce a raw position (int, float or numeric string) to 0..100."""
    return _bounded_int(value, POSITION_MIN, POSITION_MAX, "position")


def parse_angle(value) -> int:
    """Coerce a raw tilt angle to the signed range the stick accepts."""
    return _bounded_int(value, ANGLE_MIN, ANGLE_MAX, "angle")
