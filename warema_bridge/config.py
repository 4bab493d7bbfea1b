"""
Configuration schema for the Warema bridge.

Settings come from environment variables (the variable names used by the
existing add-on), optionally layered over a YAML file. Every interval is in
milliseconds, as the environment variables are; the ``*_seconds``
properties convert for the Python side.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

import yaml

from warema_mqtt.schemas import DEFAULT_DEVICE_TYPE

DISCOVERY_PAN_ID = "FFFF"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _split_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(',')
    return [str(item).strip() for item in items if str(item).strip()]


@dataclass(frozen=True)
class ForcedDevice:
    """One ``snr[:type]`` entry of FORCE_DEVICES."""

    snr: str
    type: int = int(DEFAULT_DEVICE_TYPE)

    @classmethod
    def parse(cls, entry: str) -> "ForcedDevice":
        snr, _, raw_type = entry.strip().partition(':')
        if not snr:
            raise ValueError(f"Invalid forced device entry: '{entry}'")
        if not raw_type:
            return cls(snr=snr)
        try:
            return cls(snr=snr, type=int(raw_type))
        except ValueError:
            raise ValueError(f"Invalid device type in forced device entry: '{entry}'")


@dataclass(frozen=True)
class MQTTConfig:
    """MQTT broker configuration."""

    broker: str = "localhost"
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    client_id: str = "warema_bridge"
    qos: int = 0

    def __post_init__(self):
        if not self.broker:
            raise ValueError("MQTT broker cannot be empty")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"MQTT port must be in [1, 65535], got {self.port}")
        if self.qos not in {0, 1, 2}:
            raise ValueError(f"MQTT QoS must be 0, 1, or 2, got {self.qos}")

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "MQTTConfig":
        """
        Parse ``mqtt://host[:port]`` (``mqtts``/``tcp`` schemes accepted).

        Example:
            >>> MQTTConfig.from_url("mqtt://broker.local:1884").port
            1884
        """
        if "://" not in url:
            url = f"mqtt://{url}"
        parsed = urlparse(url)
        default_port = 8883 if parsed.scheme == "mqtts" else 1883
        return cls(
            broker=parsed.hostname or "localhost",
            port=parsed.port or default_port,
            username=kwargs.pop("username", None) or parsed.username,
            password=kwargs.pop("password", None) or parsed.password,
            **kwargs,
        )


@dataclass(frozen=True)
class WMSConfig:
    """Radio network parameters handed to the stick driver."""

    channel: int = 17
    key: str = "00112233445566778899AABBCCDDEEFF"
    pan_id: str = DISCOVERY_PAN_ID
    serial_port: str = "/dev/ttyUSB0"
    driver: Optional[str] = None

    def __post_init__(self):
        if not 11 <= self.channel <= 26:
            raise ValueError(f"WMS channel must be in [11, 26], got {self.channel}")
        if len(self.key) != 32:
            raise ValueError(f"WMS key must be 32 hex characters, got {len(self.key)}")
        try:
            int(self.key, 16)
            int(self.pan_id, 16)
        except ValueError:
            raise ValueError("WMS key and PAN id must be hexadecimal")
        if not self.serial_port:
            raise ValueError("WMS serial port cannot be empty")

    @property
    def discovery_mode(self) -> bool:
        """PAN id FFFF: the stick is only used to discover network parameters."""
        return self.pan_id.upper() == DISCOVERY_PAN_ID


@dataclass(frozen=True)
class BridgeConfig:
    """
    Main configuration for the bridge.

    Immutable after construction; validated in __post_init__.
    """

    mqtt_config: MQTTConfig = field(default_factory=MQTTConfig)
    wms_config: WMSConfig = field(default_factory=WMSConfig)

    ignored_devices: Tuple[str, ...] = ()
    forced_devices: Tuple[ForcedDevice, ...] = ()

    polling_interval: int = 30000
    moving_interval: int = 1000
    availability_timeout: int = 300000
    wake_up_interval: int = 60000
    rescan_interval: int = 3600000

    log_level: str = "info"

    def __post_init__(self):
        for name in (
            "polling_interval",
            "moving_interval",
            "availability_timeout",
            "wake_up_interval",
            "rescan_interval",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be > 0 ms, got {value}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}, got '{self.log_level}'")

    @property
    def logging_level(self) -> int:
        return LOG_LEVELS[self.log_level]

    @property
    def availability_timeout_seconds(self) -> float:
        return self.availability_timeout / 1000.0

    @property
    def availability_check_seconds(self) -> float:
        return self.availability_timeout / 2000.0

    @property
    def wake_up_interval_seconds(self) -> float:
        return self.wake_up_interval / 1000.0

    @property
    def rescan_interval_seconds(self) -> float:
        return self.rescan_interval / 1000.0

    def is_ignored(self, snr: str) -> bool:
        return snr in self.ignored_devices

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BridgeConfig":
        """
        Build from a flat mapping keyed by the environment variable names.

        Example:
            >>> BridgeConfig.from_dict({"MQTT_SERVER": "mqtt://broker", "FORCE_DEVICES": "123:21"})
        """
        def get(key, default=None):
            value = data.get(key)
            return default if value in (None, "") else value

        mqtt_config = MQTTConfig.from_url(
            str(get("MQTT_SERVER", "mqtt://localhost")),
            username=get("MQTT_USER"),
            password=get("MQTT_PASSWORD"),
        )

        wms_config = WMSConfig(
            channel=int(get("WMS_CHANNEL", 17)),
            key=str(get("WMS_KEY", "00112233445566778899AABBCCDDEEFF")),
            pan_id=str(get("WMS_PAN_ID", DISCOVERY_PAN_ID)),
            serial_port=str(get("WMS_SERIAL_PORT", "/dev/ttyUSB0")),
            driver=get("WMS_DRIVER"),
        )

        return cls(
            mqtt_config=mqtt_config,
            wms_config=wms_config,
            ignored_devices=tuple(_split_list(get("IGNORED_DEVICES"))),
            forced_devices=tuple(ForcedDevice.parse(e) for e in _split_list(get("FORCE_DEVICES"))),
            polling_interval=int(get("POLLING_INTERVAL", 30000)),
            moving_interval=int(get("MOVING_INTERVAL", 1000)),
            availability_timeout=int(get("AVAILABILITY_TIMEOUT", 300000)),
            wake_up_interval=int(get("WAKE_UP_INTERVAL", 60000)),
            rescan_interval=int(get("RESCAN_INTERVAL", 3600000)),
            log_level=str(get("LOG_LEVEL", "info")).lower(),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        """Load from environment variables only."""
        return cls.from_dict(os.environ if environ is None else environ)

    @classmethod
    def from_yaml(cls, yaml_path: Path, environ: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        """
        Load a YAML file, then let environment variables override it.

        Example YAML:
            MQTT_SERVER: "mqtt://192.168.1.10"
            MQTT_USER: "warema"
            WMS_PAN_ID: "1A2B"
            WMS_KEY: "0123456789ABCDEF0123456789ABCDEF"
            WMS_DRIVER: "wms_stick.driver:WmsStick"
            FORCE_DEVICES:
              - "123456:25"
              - "234567"
            AVAILABILITY_TIMEOUT: 300000
        """
        with open(yaml_path) as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {yaml_path}")

        environ = os.environ if environ is None else environ
        merged = {str(k).upper(): v for k, v in data.items()}
        merged.update({k: v for k, v in environ.items() if v != ""})
        return cls.from_dict(merged)
