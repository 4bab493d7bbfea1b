"""
MQTT Connection
===============

Bounded Context: MQTT Infrastructure

This module owns the bridge's single MQTT session.

Design:
- One paho-mqtt client for publishing and subscribing
- Last will: ``warema/bridge/state = offline`` (retained)
- Command topics (re)subscribed on every connect
- Connect handler lets the owner restore retained state after a reconnect
- Reconnection delegated to paho (connect_async + loop_start)
- Structured logging integration

Responsibilities:
- MQTT connection lifecycle
- Raw publish with retain flag
- Handing inbound messages to a single handler
- NOT responsible for: Topic layout or payload formatting (publishers)

Example:
    >>> connection = MQTTConnection(
    ...     broker_host="localhost",
    ...     broker_port=1883,
    ...     client_id="warema_bridge",
    ...     logger=create_logger("connection"),
    ... )
    >>> connection.set_message_handler(subscriber.handle_message)
    >>> connection.connect()
    >>> connection.publish("warema/123456/position", "40", retain=True)
"""

import threading
from typing import Any, Callable, Dict, Optional

import paho.mqtt.client as mqtt

from .logging import StructuredLogger, LogEvent
from .schemas import topics

MessageHandler = Callable[[str, bytes], None]
ConnectHandler = Callable[[], None]


class MQTTConnection:
    """
    paho-mqtt session with last will and command subscriptions.

    Attributes:
        broker_host: MQTT broker hostname
        broker_port: MQTT broker port
        client_id: MQTT client identifier
        qos: Quality of Service for publishes and subscriptions
        logger: Structured logger instance

    Thread Safety:
        paho runs its network loop in a background thread (loop_start);
        publish() may be called from any thread.
    """

    def __init__(
        self,
        broker_host: str,
        broker_port: int,
        client_id: str,
        logger: StructuredLogger,
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 0,
        keepalive: int = 60,
    ):
        """
        Initialize MQTT connection.

        Args:
            broker_host: MQTT broker hostname
            broker_port: MQTT broker port
            client_id: Unique client identifier
            logger: Structured logger for observability
            username: MQTT authentication username (optional)
            password: MQTT authentication password (optional)
            qos: Quality of Service (default: 0)
            keepalive: Keepalive interval in seconds
        """
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.client_id = client_id
        self.logger = logger
        self.qos = qos
        self.keepalive = keepalive

        self.client = mqtt.Client(
            client_id=client_id,
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        )
        if username:
            self.client.username_pw_set(username, password)

        self.client.will_set(
            topics.BRIDGE_STATE_TOPIC,
            payload=topics.PAYLOAD_OFFLINE,
            qos=qos,
            retain=True,
        )
        self.client.reconnect_delay_set(min_delay=1, max_delay=60)

        # Callbacks
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message

        # Connection state
        self._connected = threading.Event()
        self._running = False
        self._message_handler: Optional[MessageHandler] = None
        self._connect_handler: Optional[ConnectHandler] = None
        self._message_count = 0
        self._stats_lock = threading.Lock()

    @property
    def broker(self) -> str:
        return f"{self.broker_host}:{self.broker_port}"

    def set_message_handler(self, handler: MessageHandler) -> None:
        """Route every inbound message to ``handler(topic, payload)``."""
        self._message_handler = handler

    def set_connect_handler(self, handler: ConnectHandler) -> None:
        """
        Call ``handler()`` after every successful (re)connect.

        Publishes made while the session was down are dropped, so the
        handler is where retained state gets restored.
        """
        self._connect_handler = handler

    # ===== MQTT Callbacks (run in paho thread) =====

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code == 0:
            self._connected.set()
            self.logger.info(
                event=LogEvent.MQTT_CONNECTED,
                message="Connected to MQTT broker",
                metadata={'broker': self.broker, 'client_id': self.client_id}
            )

            subscriptions = topics.command_subscriptions()
            client.subscribe([(topic, self.qos) for topic in subscriptions])
            self.logger.info(
                event=LogEvent.MQTT_SUBSCRIBED,
                message="Subscribed to command topics",
                metadata={'topics': subscriptions}
            )

            self.publish(topics.BRIDGE_STATE_TOPIC, topics.PAYLOAD_ONLINE, retain=True)

            if self._connect_handler is not None:
                try:
                    self._connect_handler()
                except Exception as e:
                    self.logger.error(
                        event=LogEvent.MQTT_CONNECTION_ERROR,
                        message="Error in connect handler",
                        exc_info=e,
                        metadata={'broker': self.broker}
                    )
        else:
            self._connected.clear()
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Failed to connect to broker (rc={reason_code})",
                metadata={'broker': self.broker}
            )

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        self._connected.clear()
        if reason_code == 0:
            self.logger.info(
                event=LogEvent.MQTT_DISCONNECTED,
                message="Disconnected from MQTT broker",
                metadata={'broker': self.broker}
            )
        else:
            self.logger.warning(
                event=LogEvent.MQTT_DISCONNECTED,
                message="Unexpected disconnection, paho will reconnect",
                metadata={'broker': self.broker, 'reason_code': str(reason_code)}
            )

    def _on_message(self, client, userdata, msg) -> None:
        if self._message_handler is None:
            return
        try:
            self._message_handler(msg.topic, msg.payload)
        except Exception as e:
            self.logger.error(
                event=LogEvent.COMMAND_HANDLER_ERROR,
                message="Error handling inbound message",
                exc_info=e,
                metadata={'topic': msg.topic}
            )

    # ===== Lifecycle =====

    def connect(self, timeout: float = 10.0) -> bool:
        """
        Start the session and wait for the first CONNACK.

        A timeout is not fatal: paho keeps retrying in the background.

        Args:
            timeout: Seconds to wait for the initial connection

        Returns:
            True if connected within timeout, False otherwise
        """
        try:
            self.client.connect_async(self.broker_host, self.broker_port, keepalive=self.keepalive)
            self.client.loop_start()
            self._running = True
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Failed to start MQTT session",
                exc_info=e,
                metadata={'broker': self.broker}
            )
            return False

        if self._connected.wait(timeout=timeout):
            return True

        self.logger.warning(
            event=LogEvent.MQTT_CONNECTION_ERROR,
            message="Connection timeout, still retrying in background",
            metadata={'timeout': timeout, 'broker': self.broker}
        )
        return False

    def disconnect(self) -> None:
        """
        Publish ``offline`` and close the session.

        Safe to call multiple times.
        """
        if not self._running:
            return
        try:
            if self._connected.is_set():
                info = self.client.publish(
                    topics.BRIDGE_STATE_TOPIC,
                    topics.PAYLOAD_OFFLINE,
                    qos=self.qos,
                    retain=True,
                )
                info.wait_for_publish(timeout=2.0)
            self.client.disconnect()
            self.client.loop_stop()
            self.logger.info(
                event=LogEvent.MQTT_DISCONNECTED,
                message="Disconnected from broker",
                metadata={'message_count': self._message_count}
            )
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Error during disconnect",
                exc_info=e
            )
        finally:
            self._running = False
            self._connected.clear()

    def is_connected(self) -> bool:
        """Check if currently connected to broker."""
        return self._connected.is_set()

    def publish(self, topic: str, payload: str, retain: bool = False) -> bool:
        """
        Publish a raw payload.

        Args:
            topic: Full topic
            payload: Text payload
            retain: MQTT retain flag

        Returns:
            True if handed to the client, False otherwise
        """
        if not self._connected.is_set():
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message="Cannot publish: not connected to broker",
                metadata={'topic': topic}
            )
            return False

        try:
            result = self.client.publish(topic, payload, qos=self.qos, retain=retain)
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_PUBLISH_ERROR,
                message="Error publishing message",
                exc_info=e,
                metadata={'topic': topic}
            )
            return False

        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message=f"Publish failed (rc={result.rc})",
                metadata={'topic': topic}
            )
            return False

        with self._stats_lock:
            self._message_count += 1
        self.logger.debug(
            event=LogEvent.MQTT_PUBLISH_SUCCESS,
            message="Published message",
            metadata={'topic': topic, 'payload': payload, 'retain': retain}
        )
        return True

    def get_stats(self) -> Dict[str, Any]:
        """Connection statistics."""
        with self._stats_lock:
            return {
                'message_count': self._message_count,
                'connected': self._connected.is_set(),
                'broker': self.broker,
            }
