"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for the bridge's structured logs.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators (Loki, Elasticsearch)

Event Naming Convention:
    <component>.<category>.<action>

    component: mqtt, device, command, error
    category: connected, availability, discovery
    action: success, failed, changed

Example Log Query (Loki):
    {app="warema-bridge"} | json | event="device.availability.changed"
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - mqtt.*: MQTT broker interactions
    - device.*: Device state publication
    - command.*: Inbound command requests
    - error.*: Error conditions
    """

    # ========== MQTT Events ==========
    MQTT_CONNECTED = "mqtt.connected"
    """MQTT broker connection established."""

    MQTT_DISCONNECTED = "mqtt.disconnected"
    """MQTT broker connection lost."""

    MQTT_SUBSCRIBED = "mqtt.subscribed"
    """Command topics subscribed."""

    MQTT_PUBLISH_SUCCESS = "mqtt.publish.success"
    """Message successfully handed to the broker."""

    MQTT_PUBLISH_FAILED = "mqtt.publish.failed"
    """Message publication failed."""

    # ========== Device Events ==========
    DEVICE_DISCOVERY_PUBLISHED = "device.discovery.published"
    """Home Assistant discovery config published for a device."""

    DEVICE_AVAILABILITY_CHANGED = "device.availability.changed"
    """Per-device availability flipped (edge-triggered)."""

    DEVICE_STATE_PUBLISHED = "device.state.published"
    """Position, tilt or motion state published."""

    WEATHER_PUBLISHED = "device.weather.published"
    """Weather station telemetry published."""

    BRIDGE_STATE_PUBLISHED = "bridge.state.published"
    """Bridge online/offline state published."""

    # ========== Command Events ==========
    COMMAND_RECEIVED = "command.received"
    """Inbound command request parsed from a command topic."""

    HOMEASSISTANT_STATUS = "command.homeassistant_status"
    """Home Assistant birth/will message received."""

    # ========== Error Events ==========
    COMMAND_PARSE_ERROR = "error.command_parse"
    """Inbound command payload could not be parsed."""

    COMMAND_HANDLER_ERROR = "error.command_handler"
    """Command callback raised."""

    MQTT_CONNECTION_ERROR = "error.mqtt_connection"
    """Failed to connect to MQTT broker."""

    MQTT_PUBLISH_ERROR = "error.mqtt_publish"
    """Error during message publication."""


# Event categories for filtering
MQTT_EVENTS = {
    LogEvent.MQTT_CONNECTED,
    LogEvent.MQTT_DISCONNECTED,
    LogEvent.MQTT_SUBSCRIBED,
    LogEvent.MQTT_PUBLISH_SUCCESS,
    LogEvent.MQTT_PUBLISH_FAILED,
}

DEVICE_EVENTS = {
    LogEvent.DEVICE_DISCOVERY_PUBLISHED,
    LogEvent.DEVICE_AVAILABILITY_CHANGED,
    LogEvent.DEVICE_STATE_PUBLISHED,
    LogEvent.WEATHER_PUBLISHED,
    LogEvent.BRIDGE_STATE_PUBLISHED,
}

COMMAND_EVENTS = {
    LogEvent.COMMAND_RECEIVED,
    LogEvent.HOMEASSISTANT_STATUS,
}

ERROR_EVENTS = {
    LogEvent.COMMAND_PARSE_ERROR,
    LogEvent.COMMAND_HANDLER_ERROR,
    LogEvent.MQTT_CONNECTION_ERROR,
    LogEvent.MQTT_PUBLISH_ERROR,
}
