"""
Device registry tests.
"""

import pytest

from warema_mqtt.schemas import DeviceType, MotionState
from warema_bridge.registry import DeviceRegistry


def test_register_seeds_online_with_last_seen(registry, clock):
    device = registry.register("123456", DeviceType.RADIO_MOTOR)

    assert device.online is True
    assert device.last_seen_at == clock.now
    assert device.position is None
    assert "123456" in registry
    assert len(registry) == 1


def test_get_returns_a_copy(registry):
    registry.register("123456", DeviceType.RADIO_MOTOR)

    copy = registry.get("123456")
    copy.position = 99

    assert registry.get("123456").position is None
    assert registry.get("999999") is None


def test_update_position_tracks_previous(registry):
    registry.register("123456", DeviceType.RADIO_MOTOR)

    assert registry.update_position("123456", 40, moving=True) == MotionState.CLOSING
    assert registry.update_position("123456", 20, moving=True) == MotionState.OPENING
    assert registry.update_position("123456", 20, moving=False) == MotionState.STOPPED
    assert registry.get("123456").position == 20


def test_update_unknown_device_raises(registry):
    with pytest.raises(KeyError):
        registry.update_position("404", 10, moving=False)
    with pytest.raises(KeyError):
        registry.update_tilt("404", 10)


def test_set_online_reports_edges(registry, clock):
    registry.register("123456", DeviceType.RADIO_MOTOR)
    seen = registry.get("123456").last_seen_at

    clock.advance(10)
    assert registry.set_online("123456", True) is False
    assert registry.get("123456").last_seen_at == seen + 10

    clock.advance(10)
    assert registry.set_online("123456", False) is True
    assert registry.set_online("123456", False) is False
    # going offline keeps the last liveness time
    assert registry.get("123456").last_seen_at == seen + 10

    assert registry.set_online("123456", True) is True
    assert registry.set_online("404", True) is None


def test_offline_ids_and_count(registry):
    registry.register("1", DeviceType.RADIO_MOTOR)
    registry.register("2", DeviceType.ACTUATOR_UP)
    registry.set_online("2", False)

    assert registry.offline_ids() == ["2"]
    assert registry.offline_count() == 1
    assert sorted(registry.ids()) == ["1", "2"]


def test_clear_drops_devices_and_availability(registry):
    registry.register("1", DeviceType.RADIO_MOTOR)
    registry.register("2", DeviceType.WEATHER_STATION_ECO)

    cleared = registry.clear()

    assert sorted(cleared) == ["1", "2"]
    assert len(registry) == 0
    assert registry.availability("1") is None
    assert registry.availability_records() == []


def test_snapshot_is_plain_data(registry):
    registry.register("1", DeviceType.RADIO_MOTOR)
    registry.update_tilt("1", -30)

    snapshot = registry.snapshot()

    assert snapshot["1"]["type"] == 25
    assert snapshot["1"]["tilt"] == -30
    assert snapshot["1"]["online"] is True


def test_remove():
    registry = DeviceRegistry(clock=lambda: 0.0)
    registry.register("1", DeviceType.RADIO_MOTOR)

    assert registry.remove("1").snr == "1"
    assert registry.remove("1") is None
