"""
Base MQTT Publisher
==================

Bounded Context: MQTT Infrastructure

Abstract base class for the bridge's publishers.

Design:
- Publishers share one MQTTConnection (one session, one last will)
- Subclasses format topic → payload maps; the base publishes them
- Structured logging integration

Architecture:
    BasePublisher (abstract)
        ↓
    DeviceStatePublisher, DiscoveryPublisher (concrete)

Responsibilities:
- Delegating publishes to the connection
- Per-publisher statistics
- NOT responsible for: Connection lifecycle (MQTTConnection)
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Protocol

from ..logging import StructuredLogger


class PublishTarget(Protocol):
    """What a publisher needs from the MQTT session."""

    def publish(self, topic: str, payload: str, retain: bool = False) -> bool: ...

    def is_connected(self) -> bool: ...


class BasePublisher(ABC):
    """
    Abstract base class for MQTT publishers.

    Attributes:
        connection: Shared MQTT session (MQTTConnection or a test double)
        logger: Structured logger instance
    """

    def __init__(self, connection: PublishTarget, logger: StructuredLogger):
        self.connection = connection
        self.logger = logger
        self._message_count = 0
        self._failed_count = 0
        self._stats_lock = threading.Lock()

    @abstractmethod
    def format_message(self, *args, **kwargs) -> Dict[str, str]:
        """
        Format a topic → payload map for publication.

        Subclasses must implement this.
        """
        raise NotImplementedError("Subclasses must implement format_message()")

    def publish(self, topic: str, payload: str, retain: bool = False) -> bool:
        """
        Publish one message through the shared connection.

        Returns:
            True if the connection accepted the message
        """
        ok = self.connection.publish(topic, payload, retain=retain)
        with self._stats_lock:
            if ok:
                self._message_count += 1
            else:
                self._failed_count += 1
        return ok

    def publish_many(self, messages: Dict[str, str], retain: bool = False) -> bool:
        """Publish every entry of a formatted map; True if all succeeded."""
        results = [self.publish(topic, payload, retain=retain) for topic, payload in messages.items()]
        return all(results)

    def get_stats(self) -> Dict[str, Any]:
        """Publisher statistics."""
        with self._stats_lock:
            return {
                'message_count': self._message_count,
                'failed_count': self._failed_count,
                'connected': self.connection.is_connected(),
            }
