"""
Warema MQTT Communication Package
=================================

Bounded Context: MQTT side of the Warema WMS bridge

This package owns everything the bridge exchanges with the MQTT broker:
the session (with its last will), the publishers that emit device state and
Home Assistant discovery configs, and the subscriber that turns command
topics into typed requests.

Architecture:
- schemas/: Topic layout, device vocabulary, discovery, telemetry, commands
- connection.py: Single paho-mqtt session
- publishers/: DeviceStatePublisher, DiscoveryPublisher
- subscriber.py: CommandSubscriber
- logging/: Structured JSON logging

Public API
----------
Schemas:
    DeviceType, MotionState, DiscoveryConfig, WeatherReading,
    CommandKind, SetAction, CommandRequest, CommandParseError

Transport:
    MQTTConnection, CommandSubscriber

Publishers:
    BasePublisher, DeviceStatePublisher, DiscoveryPublisher

Logging:
    LogEvent, StructuredLogger, create_logger

Example:
    >>> from warema_mqtt import MQTTConnection, DeviceStatePublisher, create_logger
    >>>
    >>> logger = create_logger("bridge")
    >>> connection = MQTTConnection(
    ...     broker_host="localhost",
    ...     broker_port=1883,
    ...     client_id="warema_bridge",
    ...     logger=logger,
    ... )
    >>> connection.connect()
    >>> DeviceStatePublisher(connection, logger).publish_position("123456", 40)
"""

__version__ = "1.0.0"

# Schemas
from .schemas import (
    DeviceType,
    MotionState,
    DiscoveryConfig,
    WeatherReading,
    CommandKind,
    SetAction,
    CommandRequest,
    CommandParseError,
)

# Transport
from .connection import MQTTConnection
from .subscriber import CommandSubscriber

# Publishers
from .publishers import (
    BasePublisher,
    DeviceStatePublisher,
    DiscoveryPublisher,
)

# Logging
from .logging import (
    LogEvent,
    StructuredLogger,
    create_logger,
)

__all__ = [
    '__version__',
    # Schemas
    'DeviceType',
    'MotionState',
    'DiscoveryConfig',
    'WeatherReading',
    'CommandKind',
    'SetAction',
    'CommandRequest',
    'CommandParseError',
    # Transport
    'MQTTConnection',
    'CommandSubscriber',
    # Publishers
    'BasePublisher',
    'DeviceStatePublisher',
    'DiscoveryPublisher',
    # Logging
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
