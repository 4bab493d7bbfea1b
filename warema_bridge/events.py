"""
Protocol events - typed form of the stick driver's messages.

The WMS stick driver reports everything through one callback with a topic
string and a loosely shaped payload. ``parse_stick_message`` fixes the
canonical types at that boundary (snr: str, position: 0..100, angle: signed
int) so the rest of the bridge only ever sees the frozen dataclasses below.

Driver topics:
    wms-vb-init-completion          -> InitCompleted
    wms-vb-scanned-devices          -> ScannedDevices
    wms-vb-rcv-weather-broadcast    -> WeatherBroadcast
    wms-vb-blind-position-update    -> PositionUpdate
    wms-vb-cmd-result-set-position  -> CommandResult(SET_POSITION)
    wms-vb-cmd-result-get-position  -> CommandResult(GET_POSITION)
    wms-vb-cmd-result-stop          -> CommandResult(STOP)
    anything else                   -> UnknownMessage

Internal events come from the bridge's own timers and MQTT session and travel
through the same dispatch queue: TimerFired, FollowUpDue and BrokerConnected.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from warema_mqtt.schemas import WeatherReading, parse_angle, parse_position

TOPIC_INIT_COMPLETION = "wms-vb-init-completion"
TOPIC_SCANNED_DEVICES = "wms-vb-scanned-devices"
TOPIC_WEATHER_BROADCAST = "wms-vb-rcv-weather-broadcast"
TOPIC_POSITION_UPDATE = "wms-vb-blind-position-update"
TOPIC_CMD_RESULT_SET_POSITION = "wms-vb-cmd-result-set-position"
TOPIC_CMD_RESULT_GET_POSITION = "wms-vb-cmd-result-get-position"
TOPIC_CMD_RESULT_STOP = "wms-vb-cmd-result-stop"


class MalformedEventError(ValueError):
    """Raised when a driver message lacks a required field or is out of range."""
    pass


class CommandResultKind(str, Enum):
    SET_POSITION = "set-position"
    GET_POSITION = "get-position"
    STOP = "stop"


@dataclass(frozen=True)
class InitCompleted:
    """Stick finished joining the network."""
    pass


@dataclass(frozen=True)
class ScannedDevice:
    snr: str
    type: int


@dataclass(frozen=True)
class ScannedDevices:
    devices: Tuple[ScannedDevice, ...] = ()


@dataclass(frozen=True)
class WeatherBroadcast:
    reading: WeatherReading

    @property
    def snr(self) -> str:
        return self.reading.snr


@dataclass(frozen=True)
class PositionUpdate:
    snr: str
    position: Optional[int] = None
    angle: Optional[int] = None
    moving: bool = False


@dataclass(frozen=True)
class CommandResult:
    kind: CommandResultKind
    snr: str
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return not self.error


@dataclass(frozen=True)
class UnknownMessage:
    topic: str
    payload: Any = None


@dataclass(frozen=True)
class TimerFired:
    """A periodic task ticked; ``task`` is its name."""
    task: str


@dataclass(frozen=True)
class FollowUpDue:
    """Delayed position query for devices probed by the last wake-up round."""
    snrs: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BrokerConnected:
    """The MQTT session (re)connected; retained device state must be restored."""
    pass


StickEvent = Union[
    InitCompleted,
    ScannedDevices,
    WeatherBroadcast,
    PositionUpdate,
    CommandResult,
    UnknownMessage,
]

InternalEvent = Union[TimerFired, FollowUpDue, BrokerConnected]


def _require_snr(payload: Mapping[str, Any], topic: str) -> str:
    snr = payload.get('snr')
    if snr is None or str(snr).strip() == '':
        raise MalformedEventError(f"{topic}: missing snr")
    return str(snr).strip()


def _require_mapping(payload: Any, topic: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise MalformedEventError(f"{topic}: payload must be an object, got {type(payload).__name__}")
    return payload


def _number(value: Any, name: str, topic: str) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise MalformedEventError(f"{topic}: {name} is not a number ({value!r})")
    return value


def _parse_scanned(payload: Any) -> ScannedDevices:
    payload = _require_mapping(payload, TOPIC_SCANNED_DEVICES)
    raw_devices = payload.get('devices')
    if not isinstance(raw_devices, (list, tuple)):
        raise MalformedEventError(f"{TOPIC_SCANNED_DEVICES}: missing devices list")

    devices = []
    for raw in raw_devices:
        raw = _require_mapping(raw, TOPIC_SCANNED_DEVICES)
        snr = _require_snr(raw, TOPIC_SCANNED_DEVICES)
        try:
            device_type = int(raw.get('type'))
        except (TypeError, ValueError):
            raise MalformedEventError(
                f"{TOPIC_SCANNED_DEVICES}: device {snr} has invalid type {raw.get('type')!r}"
            )
        devices.append(ScannedDevice(snr=snr, type=device_type))
    return ScannedDevices(devices=tuple(devices))


def _parse_weather(payload: Any) -> WeatherBroadcast:
    payload = _require_mapping(payload, TOPIC_WEATHER_BROADCAST)
    weather = _require_mapping(payload.get('weather'), TOPIC_WEATHER_BROADCAST)
    snr = _require_snr(weather, TOPIC_WEATHER_BROADCAST)

    missing = [key for key in ('lumen', 'temp', 'wind') if weather.get(key) is None]
    if missing:
        raise MalformedEventError(f"{TOPIC_WEATHER_BROADCAST}: missing {', '.join(missing)}")

    return WeatherBroadcast(
        reading=WeatherReading(
            snr=snr,
            lumen=_number(weather['lumen'], 'lumen', TOPIC_WEATHER_BROADCAST),
            temp=_number(weather['temp'], 'temp', TOPIC_WEATHER_BROADCAST),
            wind=_number(weather['wind'], 'wind', TOPIC_WEATHER_BROADCAST),
            rain=bool(weather.get('rain')),
        )
    )


def _parse_position_update(payload: Any) -> PositionUpdate:
    if not payload:
        raise MalformedEventError(f"{TOPIC_POSITION_UPDATE}: missing payload")
    payload = _require_mapping(payload, TOPIC_POSITION_UPDATE)
    snr = _require_snr(payload, TOPIC_POSITION_UPDATE)

    try:
        position = parse_position(payload['position']) if payload.get('position') is not None else None
        angle = parse_angle(payload['angle']) if payload.get('angle') is not None else None
    except ValueError as e:
        raise MalformedEventError(f"{TOPIC_POSITION_UPDATE}: device {snr}: {e}")

    return PositionUpdate(
        snr=snr,
        position=position,
        angle=angle,
        moving=payload.get('moving') is True,
    )


def _parse_command_result(kind: CommandResultKind, topic: str, payload: Any) -> CommandResult:
    payload = _require_mapping(payload, topic)
    error = payload.get('error')
    return CommandResult(
        kind=kind,
        snr=_require_snr(payload, topic),
        error=str(error) if error else None,
    )


_COMMAND_RESULT_TOPICS = {
    TOPIC_CMD_RESULT_SET_POSITION: CommandResultKind.SET_POSITION,
    TOPIC_CMD_RESULT_GET_POSITION: CommandResultKind.GET_POSITION,
    TOPIC_CMD_RESULT_STOP: CommandResultKind.STOP,
}


def parse_stick_message(topic: str, payload: Any) -> StickEvent:
    """
    Convert one driver message into a typed event.

    Args:
        topic: Driver message topic (``wms-vb-*``)
        payload: Driver payload (dict-like)

    Returns:
        One of the StickEvent dataclasses

    Raises:
        MalformedEventError: Required field missing or value out of range

    Example:
        >>> parse_stick_message("wms-vb-blind-position-update",
        ...                     {"snr": 123456, "position": 40, "moving": True})
        PositionUpdate(snr='123456', position=40, angle=None, moving=True)
    """
    if topic == TOPIC_INIT_COMPLETION:
        return InitCompleted()
    if topic == TOPIC_SCANNED_DEVICES:
        return _parse_scanned(payload)
    if topic == TOPIC_WEATHER_BROADCAST:
        return _parse_weather(payload)
    if topic == TOPIC_POSITION_UPDATE:
        return _parse_position_update(payload)
    if topic in _COMMAND_RESULT_TOPICS:
        return _parse_command_result(_COMMAND_RESULT_TOPICS[topic], topic, payload)
    return UnknownMessage(topic=topic, payload=payload)
