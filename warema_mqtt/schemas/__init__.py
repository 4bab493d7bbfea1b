"""
Warema MQTT Schemas
===================

Bounded Context: Data Structures

Immutable, typed structures for everything the bridge sends or receives
over MQTT.

Design:
- Frozen dataclasses (immutability)
- Enums for every closed vocabulary
- Topic strings built in one place (topics.py)

Public API
----------
Device Types:
    DeviceType, MotionState, parse_position, parse_angle

Discovery:
    DiscoveryConfig, build_discovery_configs

Telemetry:
    WeatherReading

Commands:
    CommandKind, SetAction, CommandRequest, CommandParseError
"""

from .device import (
    DeviceType,
    DEFAULT_DEVICE_TYPE,
    IGNORED_TYPES,
    COVER_TYPES,
    MODEL_NAMES,
    MotionState,
    lookup_device_type,
    parse_position,
    parse_angle,
)
from .discovery import DiscoveryConfig, build_discovery_configs
from .telemetry import WeatherReading
from .commands import CommandKind, SetAction, CommandRequest, CommandParseError

__all__ = [
    # Device types
    'DeviceType',
    'DEFAULT_DEVICE_TYPE',
    'IGNORED_TYPES',
    'COVER_TYPES',
    'MODEL_NAMES',
    'MotionState',
    'lookup_device_type',
    'parse_position',
    'parse_angle',
    # Discovery
    'DiscoveryConfig',
    'build_discovery_configs',
    # Telemetry
    'WeatherReading',
    # Commands
    'CommandKind',
    'SetAction',
    'CommandRequest',
    'CommandParseError',
]
