"""
Structured Logging for the Warema MQTT layer
============================================

Bounded Context: Observability

JSON-structured logging for the MQTT connection and publishers.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from warema_mqtt.logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="connection")
    >>> logger.info(
    ...     event=LogEvent.MQTT_CONNECTED,
    ...     message="Connected to MQTT broker",
    ...     metadata={'broker': 'localhost:1883'}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
