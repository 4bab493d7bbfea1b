"""
Driver message parsing tests.
"""

import pytest

from warema_bridge.events import (
    CommandResult,
    CommandResultKind,
    InitCompleted,
    MalformedEventError,
    PositionUpdate,
    ScannedDevice,
    ScannedDevices,
    UnknownMessage,
    WeatherBroadcast,
    parse_stick_message,
)


def test_init_completion():
    assert parse_stick_message("wms-vb-init-completion", None) == InitCompleted()


def test_scanned_devices_normalizes_serials():
    event = parse_stick_message(
        "wms-vb-scanned-devices",
        {"devices": [{"snr": 123456, "type": "25"}, {"snr": "654321", "type": 6}]},
    )

    assert event == ScannedDevices(devices=(ScannedDevice("123456", 25), ScannedDevice("654321", 6)))


def test_weather_broadcast():
    event = parse_stick_message(
        "wms-vb-rcv-weather-broadcast",
        {"weather": {"snr": 600, "lumen": 1500, "temp": "21.5", "wind": 2, "rain": True}},
    )

    assert isinstance(event, WeatherBroadcast)
    assert event.snr == "600"
    assert event.reading.temp == 21.5
    assert event.reading.rain is True


def test_position_update():
    event = parse_stick_message(
        "wms-vb-blind-position-update",
        {"snr": 123, "position": 40, "angle": -20, "moving": True},
    )

    assert event == PositionUpdate(snr="123", position=40, angle=-20, moving=True)


def test_position_update_moving_must_be_true_exactly():
    event = parse_stick_message("wms-vb-blind-position-update", {"snr": "1", "position": 10, "moving": "yes"})

    assert event.moving is False
    assert event.angle is None


def test_command_results():
    ok = parse_stick_message("wms-vb-cmd-result-stop", {"snr": "1"})
    failed = parse_stick_message("wms-vb-cmd-result-set-position", {"snr": "1", "error": "no ack"})

    assert ok == CommandResult(kind=CommandResultKind.STOP, snr="1")
    assert ok.succeeded
    assert failed.kind == CommandResultKind.SET_POSITION
    assert not failed.succeeded
    assert parse_stick_message("wms-vb-cmd-result-get-position", {"snr": "1"}).kind == CommandResultKind.GET_POSITION


def test_unknown_topic_is_passed_through():
    assert parse_stick_message("wms-vb-whatever", {"a": 1}) == UnknownMessage("wms-vb-whatever", {"a": 1})


@pytest.mark.parametrize("topic, payload", [
    ("wms-vb-blind-position-update", None),
    ("wms-vb-blind-position-update", {"position": 10}),
    ("wms-vb-blind-position-update", {"snr": "1", "position": 101}),
    ("wms-vb-blind-position-update", {"snr": "1", "position": 10, "angle": 200}),
    ("wms-vb-scanned-devices", {"devices": "nope"}),
    ("wms-vb-scanned-devices", {"devices": [{"snr": "1", "type": "x"}]}),
    ("wms-vb-rcv-weather-broadcast", {"weather": {"snr": "1", "lumen": 1}}),
    ("wms-vb-rcv-weather-broadcast", {"weather": {"snr": "1", "lumen": "bright", "temp": 1, "wind": 1}}),
    ("wms-vb-cmd-result-stop", {}),
    ("wms-vb-cmd-result-stop", "1"),
])
def test_malformed_messages(topic, payload):
    with pytest.raises(MalformedEventError):
        parse_stick_message(topic, payload)
