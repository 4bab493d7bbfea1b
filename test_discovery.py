"""
Home Assistant discovery and state publishing tests (no broker).
"""

import json

from warema_mqtt.schemas import DeviceType, build_discovery_configs, WeatherReading
from warema_mqtt.schemas.telemetry import format_number


def configs_by_topic(snr, device_type):
    return {config.topic: config.payload for config in build_discovery_configs(snr, device_type)}


def test_weather_station_gets_four_entities():
    configs = configs_by_topic("600", DeviceType.WEATHER_STATION_ECO)

    assert sorted(configs) == [
        "homeassistant/binary_sensor/600/rain/config",
        "homeassistant/sensor/600/illuminance/config",
        "homeassistant/sensor/600/temperature/config",
        "homeassistant/sensor/600/wind/config",
    ]

    wind = configs["homeassistant/sensor/600/wind/config"]
    assert wind["device_class"] == "wind_speed"
    assert wind["unit_of_measurement"] == "m/s"
    assert wind["state_topic"] == "warema/600/wind/state"
    assert wind["unique_id"] == "600_wind"
    assert wind["object_id"] == "600_wind"
    assert wind["device"]["model"] == "Weather station eco"

    rain = configs["homeassistant/binary_sensor/600/rain/config"]
    assert rain["device_class"] == "moisture"
    assert "unit_of_measurement" not in rain


def test_actuator_up_has_tilt_but_no_state_topic():
    payload = configs_by_topic("21", DeviceType.ACTUATOR_UP)["homeassistant/cover/21/21/config"]

    assert "state_topic" not in payload
    assert payload["tilt_command_topic"] == "warema/21/set_tilt"
    assert payload["set_position_topic"] == "warema/21/set_position"
    assert payload["position_open"] == 0
    assert payload["position_closed"] == 100


def test_plug_receiver_has_state_and_tilt():
    payload = configs_by_topic("20", DeviceType.PLUG_RECEIVER)["homeassistant/cover/20/20/config"]

    assert payload["state_topic"] == "warema/20/state"
    assert payload["tilt_status_topic"] == "warema/20/tilt"
    assert payload["device"]["model"] == "Plug receiver"


def test_smart_socket_is_a_plain_cover():
    payload = configs_by_topic("24", DeviceType.SMART_SOCKET)["homeassistant/cover/24/24/config"]

    assert payload["state_topic"] == "warema/24/state"
    assert payload["command_topic"] == "warema/24/set"
    assert "position_topic" not in payload
    assert "tilt_min" not in payload


def test_remotes_are_not_exposed():
    assert build_discovery_configs("7", DeviceType.REMOTE_PRO) == []
    assert build_discovery_configs("9", DeviceType.WEBCONTROL_PRO) == []


def test_discovery_publisher_retains_configs(discovery_publisher, connection):
    assert discovery_publisher.publish_device("123", DeviceType.RADIO_MOTOR) is True

    topic, payload, retain = connection.messages[0]
    assert topic == "homeassistant/cover/123/123/config"
    assert json.loads(payload)["unique_id"] == "123"
    assert retain is True

    assert discovery_publisher.publish_device("7", DeviceType.REMOTE_PRO) is False


def test_weather_payloads():
    reading = WeatherReading(snr="600", lumen=250, temp=-3.5, wind=12.0, rain=True)

    assert reading.to_state_payloads() == {
        "warema/600/illuminance/state": "250",
        "warema/600/temperature/state": "-3.5",
        "warema/600/wind/state": "12",
        "warema/600/rain/state": "ON",
    }
    assert format_number(7.25) == "7.25"


def test_state_publisher_stats(state_publisher, connection):
    state_publisher.publish_position("1", 40)
    state_publisher.publish_tilt("1", -10)

    stats = state_publisher.get_stats()
    assert stats["message_count"] == 2
    assert stats["failed_count"] == 0
    assert stats["connected"] is True
    assert connection.retained("warema/1/position") == [True]
