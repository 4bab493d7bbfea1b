"""
Home Assistant Discovery Schema
===============================

Bounded Context: Discovery Contract

Builds the retained MQTT discovery configs that make Home Assistant create
entities for a registered device. The field sets are Home Assistant's
contract and must stay stable per device type:

    6  Weather station eco   3 sensors + 1 binary_sensor
    20 Plug receiver         cover with state, position and tilt
    21 Actuator UP           cover with position and tilt (no state topic)
    24 Smart socket          cover with state and command only
    25 Radio motor           cover with state, position and tilt

Design:
- DiscoveryConfig: frozen (topic, payload) pair
- build_discovery_configs(): pure function of (snr, device type)
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .device import DeviceType, MODEL_NAMES
from . import topics

MANUFACTURER = "Warema"

TILT_MIN = -75
TILT_MAX = 75


@dataclass(frozen=True)
class DiscoveryConfig:
    """
    One retained discovery message.

    Attributes:
        topic: ``homeassistant/<component>/<snr>/<object>/config``
        payload: JSON-compatible config body
    """
    topic: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(self.payload)


def _base_payload(snr: str, device_type: DeviceType) -> Dict[str, Any]:
    return {
        'availability': [
            {'topic': topics.BRIDGE_STATE_TOPIC},
            {'topic': topics.availability_topic(snr)},
        ],
        'unique_id': snr,
        'name': None,
        'device': {
            'identifiers': snr,
            'manufacturer': MANUFACTURER,
            'name': snr,
            'model': MODEL_NAMES[device_type],
        },
    }


def _tilt_fields(snr: str) -> Dict[str, Any]:
    return {
        'position_open': 0,
        'position_closed': 100,
        'command_topic': topics.device_topic(snr, 'set'),
        'position_topic': topics.position_topic(snr),
        'tilt_status_topic': topics.tilt_topic(snr),
        'set_position_topic': topics.device_topic(snr, 'set_position'),
        'tilt_command_topic': topics.device_topic(snr, 'set_tilt'),
        'tilt_closed_value': TILT_MIN,
        'tilt_opened_value': TILT_MAX,
        'tilt_min': TILT_MIN,
        'tilt_max': TILT_MAX,
    }


def _weather_configs(snr: str) -> List[DiscoveryConfig]:
    base = _base_payload(snr, DeviceType.WEATHER_STATION_ECO)

    # (component, sensor, device_class, unit)
    sensors = [
        ('sensor', 'illuminance', 'illuminance', 'lx'),
        ('sensor', 'temperature', 'temperature', '°C'),
        ('sensor', 'wind', 'wind_speed', 'm/s'),
        ('binary_sensor', 'rain', 'moisture', None),
    ]

    configs = []
    for component, sensor, device_class, unit in sensors:
        payload = {
            **base,
            'state_topic': topics.sensor_state_topic(snr, sensor),
            'device_class': device_class,
            'unique_id': f"{snr}_{sensor}",
            'object_id': f"{snr}_{sensor}",
        }
        if unit is not None:
            payload['unit_of_measurement'] = unit
        configs.append(
            DiscoveryConfig(
                topic=topics.discovery_topic(component, snr, sensor),
                payload=payload,
            )
        )
    return configs


def _cover_config(snr: str, device_type: DeviceType) -> DiscoveryConfig:
    payload = _base_payload(snr, device_type)

    if device_type == DeviceType.SMART_SOCKET:
        payload['state_topic'] = topics.state_topic(snr)
        payload['command_topic'] = topics.device_topic(snr, 'set')
    else:
        payload.update(_tilt_fields(snr))
        if device_type != DeviceType.ACTUATOR_UP:
            payload['state_topic'] = topics.state_topic(snr)

    return DiscoveryConfig(
        topic=topics.discovery_topic('cover', snr, snr),
        payload=payload,
    )


def build_discovery_configs(snr: str, device_type: DeviceType) -> List[DiscoveryConfig]:
    """
    Build every discovery message for one device.

    Args:
        snr: Device serial number
        device_type: Registered product class

    Returns:
        List of DiscoveryConfig (empty for types the bridge does not expose)

    Example:
        >>> configs = build_discovery_configs("123456", DeviceType.RADIO_MOTOR)
        >>> configs[0].topic
        'homeassistant/cover/123456/123456/config'
    """
    if device_type == DeviceType.WEATHER_STATION_ECO:
        return _weather_configs(snr)
    if device_type in MODEL_NAMES:
        return [_cover_config(snr, device_type)]
    return []
