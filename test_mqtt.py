"""
MQTT side tests without a broker: subscriber routing and structured logs.
"""

import json
import logging

from warema_mqtt import CommandSubscriber, MQTTConnection, create_logger
from warema_mqtt.logging import LogEvent
from warema_mqtt.schemas import CommandKind, SetAction, topics


def test_command_subscriptions():
    assert topics.command_subscriptions() == [
        "warema/+/set",
        "warema/+/set_position",
        "warema/+/set_tilt",
        "homeassistant/status",
    ]


def test_subscriber_routes_commands():
    received = []
    subscriber = CommandSubscriber(on_command=received.append, logger=create_logger("test"))

    subscriber.handle_message("warema/123/set", b"open")
    subscriber.handle_message("warema/123/set_tilt", b"250")

    assert len(received) == 1
    assert received[0].kind == CommandKind.SET
    assert received[0].action == SetAction.OPEN
    assert subscriber.get_stats() == {'commands_received': 1, 'commands_rejected': 1}


def test_subscriber_reports_homeassistant_status():
    statuses = []
    commands = []
    subscriber = CommandSubscriber(
        on_command=commands.append,
        logger=create_logger("test"),
        on_homeassistant_status=statuses.append,
    )

    subscriber.handle_message("homeassistant/status", b"online")

    assert statuses == ["online"]
    assert commands == []


def test_structured_log_line(caplog):
    logger = create_logger("log_test")
    logger.logger.propagate = True

    with caplog.at_level(logging.INFO, logger="warema_mqtt.log_test"):
        logger.info(
            event=LogEvent.DEVICE_AVAILABILITY_CHANGED,
            message="Device 1 is now offline",
            metadata={'snr': '1'},
        )

    entry = json.loads(caplog.records[-1].getMessage())
    assert entry['component'] == 'log_test'
    assert entry['event'] == LogEvent.DEVICE_AVAILABILITY_CHANGED.value
    assert entry['metadata'] == {'snr': '1'}
    assert entry['level'] == 'INFO'


class RecordingClient:
    def __init__(self):
        self.subscriptions = []

    def subscribe(self, subscriptions):
        self.subscriptions.extend(subscriptions)


def test_connection_runs_connect_handler_after_subscribing():
    connection = MQTTConnection("localhost", 1883, "test_bridge", create_logger("test"))
    client = RecordingClient()
    calls = []
    connection.set_connect_handler(lambda: calls.append(len(client.subscriptions)))

    connection._on_connect(client, None, None, 0)

    assert connection.is_connected()
    assert calls == [len(topics.command_subscriptions())]


def test_connect_handler_errors_are_logged():
    connection = MQTTConnection("localhost", 1883, "test_bridge", create_logger("test"))

    def failing():
        raise RuntimeError("boom")

    connection.set_connect_handler(failing)
    connection._on_connect(RecordingClient(), None, None, 0)

    assert connection.is_connected()
