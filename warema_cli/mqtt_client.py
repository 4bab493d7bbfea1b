"""
MQTT client wrapper for sending cover commands to the bridge.

Handles MQTT connection, publishing, and disconnection.
"""

from typing import Optional

import paho.mqtt.client as mqtt

from warema_mqtt.schemas import CommandKind, topics


class MQTTCommandClient:
    """
    MQTT client for sending commands to the bridge.

    Publishes plain-text payloads to ``warema/<snr>/<command>``, exactly as
    Home Assistant does.
    """

    def __init__(
        self,
        broker: str = "localhost",
        port: int = 1883,
        username: Optional[str] = None,
        password: Optional[str] = None
    ):
        """
        Initialize MQTT command client.

        Args:
            broker: MQTT broker host
            port: MQTT broker port
            username: Optional MQTT username
            password: Optional MQTT password
        """
        self.broker = broker
        self.port = port
        self.username = username
        self.password = password

        self.client = mqtt.Client(callback_api_version=mqtt.CallbackAPIVersion.VERSION2)

        if username and password:
            self.client.username_pw_set(username, password)

    @staticmethod
    def command_topic(snr: str, kind: CommandKind) -> str:
        """
        Example:
            >>> MQTTCommandClient.command_topic("123456", CommandKind.SET_TILT)
            'warema/123456/set_tilt'
        """
        return topics.device_topic(snr, kind.value)

    def send_command(
        self,
        snr: str,
        kind: CommandKind,
        payload: str,
        qos: int = 0
    ) -> None:
        """
        Send one command.

        Args:
            snr: Target device serial number
            kind: Command topic suffix
            payload: Plain-text payload ("OPEN", "40", "-30", ...)
            qos: Quality of Service

        Raises:
            ConnectionError: If unable to connect to MQTT broker
        """
        topic = self.command_topic(snr, kind)
        try:
            self.client.connect(self.broker, self.port, keepalive=60)
            self.client.loop_start()

            result = self.client.publish(topic, payload, qos=qos)
            result.wait_for_publish(timeout=5.0)

            self.client.disconnect()
            self.client.loop_stop()

            print(f"✅ Command sent: {topic} = {payload}")

        except ConnectionRefusedError:
            raise ConnectionError(
                f"Unable to connect to MQTT broker at {self.broker}:{self.port}. "
                "Is mosquitto running?"
            )
        except Exception as e:
            raise RuntimeError(f"Failed to send command: {e}")
