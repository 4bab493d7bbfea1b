"""
Topic Layout
============

Bounded Context: MQTT Topic Surface

Every topic the bridge publishes or subscribes to is built here. The layout
is consumed by Home Assistant and existing automations, so the strings are
fixed.

    warema/bridge/state                    online | offline (retained, LWT)
    warema/<snr>/availability              online | offline (retained)
    warema/<snr>/position                  0..100 (retained)
    warema/<snr>/tilt                      signed angle (retained)
    warema/<snr>/state                     opening | closing | open | closed | stopped
    warema/<snr>/<sensor>/state            weather station telemetry
    warema/<snr>/set                       OPEN | CLOSE | STOP | ON | OFF (inbound)
    warema/<snr>/set_position              0..100 (inbound)
    warema/<snr>/set_tilt                  signed angle (inbound)
    homeassistant/<component>/<snr>/<object>/config
"""

from typing import List

BASE_TOPIC = "warema"
DISCOVERY_PREFIX = "homeassistant"

BRIDGE_STATE_TOPIC = f"{BASE_TOPIC}/bridge/state"
HOMEASSISTANT_STATUS_TOPIC = f"{DISCOVERY_PREFIX}/status"

PAYLOAD_ONLINE = "online"
PAYLOAD_OFFLINE = "offline"

COMMAND_SUFFIXES = ("set", "set_position", "set_tilt")


def device_topic(snr: str, leaf: str) -> str:
    """Build ``warema/<snr>/<leaf>``."""
    return f"{BASE_TOPIC}/{snr}/{leaf}"


def availability_topic(snr: str) -> str:
    return device_topic(snr, "availability")


def position_topic(snr: str) -> str:
    return device_topic(snr, "position")


def tilt_topic(snr: str) -> str:
    return device_topic(snr, "tilt")


def state_topic(snr: str) -> str:
    return device_topic(snr, "state")


def sensor_state_topic(snr: str, sensor: str) -> str:
    """Weather telemetry topic, e.g. ``warema/<snr>/wind/state``."""
    return device_topic(snr, f"{sensor}/state")


def discovery_topic(component: str, snr: str, object_id: str) -> str:
    return f"{DISCOVERY_PREFIX}/{component}/{snr}/{object_id}/config"


def command_subscriptions() -> List[str]:
    """Topics the bridge subscribes to after every (re)connect."""
    return [f"{BASE_TOPIC}/+/{suffix}" for suffix in COMMAND_SUFFIXES] + [
        HOMEASSISTANT_STATUS_TOPIC
    ]
