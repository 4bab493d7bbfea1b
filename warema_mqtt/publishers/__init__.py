"""
MQTT Publishers
==============

Bounded Context: Message Production

Design:
- BasePublisher: Abstract base sharing one MQTTConnection
- DeviceStatePublisher: availability, position, tilt, state, weather, bridge
- DiscoveryPublisher: Home Assistant discovery configs

Example:
    >>> from warema_mqtt.publishers import DeviceStatePublisher
    >>> publisher = DeviceStatePublisher(connection, logger)
    >>> publisher.publish_position("123456", 40)
"""

from .base import BasePublisher
from .state import DeviceStatePublisher
from .discovery import DiscoveryPublisher

__all__ = [
    'BasePublisher',
    'DeviceStatePublisher',
    'DiscoveryPublisher',
]
