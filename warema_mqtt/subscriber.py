"""
Command Subscriber
==================

Bounded Context: Message Consumption

Turns raw inbound MQTT messages into typed CommandRequest objects and hands
them to a callback.

Message Flow:
    1. MQTTConnection receives a message (paho thread)
    2. CommandSubscriber parses topic + payload into a CommandRequest
    3. The user callback receives the typed request (keep it fast: the bridge
       only enqueues it for its dispatch thread)

Example:
    >>> subscriber = CommandSubscriber(on_command=service.submit, logger=logger)
    >>> connection.set_message_handler(subscriber.handle_message)
"""

import threading
from typing import Any, Callable, Dict, Optional

from .schemas import CommandRequest, CommandParseError
from .schemas import topics
from .logging import StructuredLogger, LogEvent


class CommandSubscriber:
    """
    Parser and dispatcher for inbound command topics.

    Attributes:
        on_command: Callback receiving each parsed CommandRequest
        on_homeassistant_status: Optional callback for ``homeassistant/status``
        logger: Structured logger instance
    """

    def __init__(
        self,
        on_command: Callable[[CommandRequest], None],
        logger: StructuredLogger,
        on_homeassistant_status: Optional[Callable[[str], None]] = None,
    ):
        self.on_command = on_command
        self.on_homeassistant_status = on_homeassistant_status
        self.logger = logger

        self._commands_received = 0
        self._commands_rejected = 0
        self._stats_lock = threading.Lock()

    def handle_message(self, topic: str, payload: bytes) -> None:
        """Entry point registered on MQTTConnection."""
        if topic == topics.HOMEASSISTANT_STATUS_TOPIC:
            self._handle_homeassistant_status(payload)
            return

        try:
            request = CommandRequest.from_mqtt(topic, payload)
        except CommandParseError as e:
            with self._stats_lock:
                self._commands_rejected += 1
            self.logger.warning(
                event=LogEvent.COMMAND_PARSE_ERROR,
                message=str(e),
                metadata={'topic': topic}
            )
            return

        with self._stats_lock:
            self._commands_received += 1
        self.logger.debug(
            event=LogEvent.COMMAND_RECEIVED,
            message="Command received",
            metadata={
                'snr': request.snr,
                'command': request.kind.value,
                'action': request.action.value if request.action else None,
                'value': request.value,
            }
        )
        self.on_command(request)

    def _handle_homeassistant_status(self, payload: bytes) -> None:
        status = payload.decode('utf-8', errors='replace').strip()
        if status == topics.PAYLOAD_ONLINE:
            self.logger.info(
                event=LogEvent.HOMEASSISTANT_STATUS,
                message="Home Assistant is online",
            )
        else:
            self.logger.debug(
                event=LogEvent.HOMEASSISTANT_STATUS,
                message=f"Home Assistant status: {status}",
            )
        if self.on_homeassistant_status is not None:
            self.on_homeassistant_status(status)

    def get_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            return {
                'commands_received': self._commands_received,
                'commands_rejected': self._commands_rejected,
            }
