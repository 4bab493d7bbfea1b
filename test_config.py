"""
Configuration tests (environment mapping and YAML layering).
"""

import logging

import pytest

from warema_bridge.config import BridgeConfig, ForcedDevice, MQTTConfig, WMSConfig


def test_defaults():
    config = BridgeConfig.from_env({})

    assert config.mqtt_config.broker == "localhost"
    assert config.mqtt_config.port == 1883
    assert config.wms_config.channel == 17
    assert config.wms_config.pan_id == "FFFF"
    assert config.wms_config.discovery_mode is True
    assert config.polling_interval == 30000
    assert config.availability_timeout_seconds == 300.0
    assert config.availability_check_seconds == 150.0
    assert config.wake_up_interval_seconds == 60.0
    assert config.rescan_interval_seconds == 3600.0
    assert config.logging_level == logging.INFO


def test_environment_mapping():
    config = BridgeConfig.from_env({
        "MQTT_SERVER": "mqtt://broker.local:1884",
        "MQTT_USER": "warema",
        "MQTT_PASSWORD": "secret",
        "IGNORED_DEVICES": "111, 222,",
        "FORCE_DEVICES": "333,444:21",
        "WMS_PAN_ID": "1a2b",
        "AVAILABILITY_TIMEOUT": "60000",
        "LOG_LEVEL": "DEBUG",
    })

    assert config.mqtt_config.broker == "broker.local"
    assert config.mqtt_config.port == 1884
    assert config.mqtt_config.username == "warema"
    assert config.mqtt_config.password == "secret"
    assert config.ignored_devices == ("111", "222")
    assert config.is_ignored("222")
    assert config.forced_devices == (ForcedDevice("333", 25), ForcedDevice("444", 21))
    assert config.wms_config.discovery_mode is False
    assert config.availability_timeout_seconds == 60.0
    assert config.logging_level == logging.DEBUG


def test_empty_values_fall_back_to_defaults():
    config = BridgeConfig.from_env({"POLLING_INTERVAL": "", "MQTT_SERVER": ""})

    assert config.polling_interval == 30000
    assert config.mqtt_config.broker == "localhost"


def test_mqtt_url_without_scheme():
    assert MQTTConfig.from_url("10.0.0.5").broker == "10.0.0.5"
    assert MQTTConfig.from_url("mqtts://secure.example").port == 8883


@pytest.mark.parametrize("kwargs", [
    {"channel": 30},
    {"key": "ABC"},
    {"key": "Z" * 32},
    {"pan_id": "XYZ"},
    {"serial_port": ""},
])
def test_invalid_wms_config(kwargs):
    with pytest.raises(ValueError):
        WMSConfig(**kwargs)


def test_invalid_bridge_config():
    with pytest.raises(ValueError):
        BridgeConfig(availability_timeout=0)
    with pytest.raises(ValueError):
        BridgeConfig(log_level="verbose")
    with pytest.raises(ValueError):
        ForcedDevice.parse("123:abc")
    with pytest.raises(ValueError):
        ForcedDevice.parse(":25")


def test_yaml_with_environment_override(tmp_path):
    path = tmp_path / "bridge.yaml"
    path.write_text(
        "MQTT_SERVER: mqtt://yaml-broker\n"
        "WMS_PAN_ID: 1A2B\n"
        "FORCE_DEVICES:\n"
        "  - '123456:25'\n"
        "  - '234567'\n"
        "RESCAN_INTERVAL: 7200000\n"
    )

    config = BridgeConfig.from_yaml(path, environ={"MQTT_SERVER": "mqtt://env-broker"})

    assert config.mqtt_config.broker == "env-broker"
    assert config.wms_config.pan_id == "1A2B"
    assert [d.snr for d in config.forced_devices] == ["123456", "234567"]
    assert config.rescan_interval == 7200000


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "bridge.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError):
        BridgeConfig.from_yaml(path, environ={})
