"""
Event router tests: stick events in, registry mutations and MQTT out.
"""

import json

import pytest

from warema_mqtt.schemas import DeviceType
from warema_bridge.config import BridgeConfig, ForcedDevice
from warema_bridge.events import (
    CommandResult,
    CommandResultKind,
    InitCompleted,
    PositionUpdate,
    ScannedDevice,
    ScannedDevices,
    UnknownMessage,
    WeatherBroadcast,
)
from warema_bridge.router import EventRouter
from warema_mqtt.schemas import WeatherReading


@pytest.fixture
def timers():
    return []


def make_router(config, registry, monitor, stick, state_publisher, discovery_publisher, timers):
    return EventRouter(
        config=config,
        registry=registry,
        monitor=monitor,
        stick=stick,
        state_publisher=state_publisher,
        discovery_publisher=discovery_publisher,
        start_timers=lambda: timers.append("started"),
    )


@pytest.fixture
def router(registry, monitor, stick, state_publisher, discovery_publisher, timers):
    return make_router(BridgeConfig(), registry, monitor, stick, state_publisher, discovery_publisher, timers)


def test_init_completed_configures_stick_and_scans(router, stick, timers):
    router.dispatch(InitCompleted())

    assert stick.calls_to("set_poll_intervals") == [(30000, 1000)]
    assert stick.calls_to("enable_command_confirmation") == [(True,)]
    assert stick.calls_to("scan") == [(False,)]
    assert timers == ["started"]


def test_every_dispatch_republishes_bridge_online(router, connection):
    router.dispatch(UnknownMessage(topic="wms-vb-something", payload={}))

    assert connection.payloads("warema/bridge/state") == ["online"]
    assert connection.retained("warema/bridge/state") == [True]


def test_scan_registers_exposed_types(router, registry, stick, connection):
    router.dispatch(ScannedDevices(devices=(
        ScannedDevice("100", 25),
        ScannedDevice("200", 21),
        ScannedDevice("300", 7),    # remote, skipped
        ScannedDevice("400", 63),   # unknown type
        ScannedDevice("500", 6),    # weather station
    )))

    assert sorted(registry.ids()) == ["100", "200", "500"]
    # weather stations are not added to the stick
    assert sorted(args[0] for args in stick.calls_to("add_device")) == ["100", "200"]
    assert connection.payloads("warema/100/availability") == ["online"]
    assert "homeassistant/cover/100/100/config" in connection.topics()
    assert "homeassistant/sensor/500/temperature/config" in connection.topics()


def test_ignored_devices_are_never_registered(registry, monitor, stick, state_publisher, discovery_publisher, timers):
    config = BridgeConfig(ignored_devices=("100",))
    router = make_router(config, registry, monitor, stick, state_publisher, discovery_publisher, timers)

    router.dispatch(ScannedDevices(devices=(ScannedDevice("100", 25), ScannedDevice("200", 25))))

    assert registry.ids() == ["200"]


def test_forced_list_overrides_scan_payload(registry, monitor, stick, state_publisher, discovery_publisher, timers):
    config = BridgeConfig(forced_devices=(ForcedDevice("111"), ForcedDevice("222", 21)))
    router = make_router(config, registry, monitor, stick, state_publisher, discovery_publisher, timers)

    router.dispatch(ScannedDevices(devices=(ScannedDevice("999", 25),)))

    assert sorted(registry.ids()) == ["111", "222"]
    assert registry.get("111").type == DeviceType.RADIO_MOTOR
    assert registry.get("222").type == DeviceType.ACTUATOR_UP


def test_discovery_payload_for_radio_motor(router, connection):
    router.register_device("123456", 25)

    payload = json.loads(connection.payloads("homeassistant/cover/123456/123456/config")[0])

    assert payload["unique_id"] == "123456"
    assert payload["name"] is None
    assert payload["device"]["manufacturer"] == "Warema"
    assert payload["device"]["model"] == "Radio motor"
    assert payload["state_topic"] == "warema/123456/state"
    assert payload["tilt_min"] == -75 and payload["tilt_max"] == 75
    assert payload["availability"] == [
        {"topic": "warema/bridge/state"},
        {"topic": "warema/123456/availability"},
    ]


def test_position_scenario(router, registry, connection):
    """Fresh device 123: open, then moving to 50, then stopped at 50."""
    router.register_device("123", 25)
    connection.clear()

    router.dispatch(PositionUpdate(snr="123", position=0, angle=0, moving=False))
    assert connection.payloads("warema/123/position") == ["0"]
    assert connection.payloads("warema/123/state") == ["open"]
    assert connection.payloads("warema/123/tilt") == ["0"]

    router.dispatch(PositionUpdate(snr="123", position=50, moving=True))
    assert connection.payloads("warema/123/state")[-1] == "closing"

    router.dispatch(PositionUpdate(snr="123", position=50, moving=False))
    assert connection.payloads("warema/123/state")[-1] == "stopped"
    assert connection.retained("warema/123/state") == [True, True, True]
    assert registry.get("123").position == 50


def test_position_update_for_unknown_device_auto_registers(router, registry, stick):
    router.dispatch(PositionUpdate(snr="777", position=100, moving=False))

    assert registry.get("777").type == DeviceType.RADIO_MOTOR
    assert registry.get("777").position == 100
    assert stick.calls_to("add_device") == [("777", "777")]


def test_position_update_for_ignored_device_is_dropped(registry, monitor, stick, state_publisher, discovery_publisher, timers, connection):
    config = BridgeConfig(ignored_devices=("777",))
    router = make_router(config, registry, monitor, stick, state_publisher, discovery_publisher, timers)

    router.dispatch(PositionUpdate(snr="777", position=100, moving=False))

    assert "777" not in registry
    assert connection.payloads("warema/777/position") == []


def test_position_update_refreshes_liveness(router, registry, connection, clock):
    router.register_device("123", 25)
    registry.set_online("123", False)

    clock.advance(50)
    router.dispatch(PositionUpdate(snr="123", position=10, moving=False))

    assert registry.availability("123").online is True
    assert registry.availability("123").last_seen_at == clock.now
    assert connection.payloads("warema/123/availability")[-1] == "online"


def test_weather_broadcast_registers_station_once(router, registry, connection, stick):
    reading = WeatherReading(snr="600", lumen=1200.0, temp=21.5, wind=3, rain=False)

    router.dispatch(WeatherBroadcast(reading))
    router.dispatch(WeatherBroadcast(reading))

    assert registry.get("600").type == DeviceType.WEATHER_STATION_ECO
    assert stick.calls_to("add_device") == []
    assert connection.payloads("warema/600/illuminance/state") == ["1200", "1200"]
    assert connection.payloads("warema/600/temperature/state") == ["21.5", "21.5"]
    assert connection.payloads("warema/600/rain/state") == ["OFF", "OFF"]
    assert len(connection.payloads("homeassistant/binary_sensor/600/rain/config")) == 1


def test_weather_station_on_ignore_list_still_publishes(registry, monitor, stick, state_publisher, discovery_publisher, timers, connection):
    config = BridgeConfig(ignored_devices=("600",))
    router = make_router(config, registry, monitor, stick, state_publisher, discovery_publisher, timers)

    router.dispatch(WeatherBroadcast(WeatherReading(snr="600", lumen=800, temp=20, wind=2, rain=False)))

    assert registry.get("600").type == DeviceType.WEATHER_STATION_ECO
    assert connection.payloads("warema/600/temperature/state") == ["20"]
    assert stick.calls_to("add_device") == []


def test_weather_broadcast_is_not_a_liveness_signal(router, registry, clock):
    reading = WeatherReading(snr="600", lumen=800, temp=20, wind=2, rain=False)
    router.dispatch(WeatherBroadcast(reading))
    registered_at = clock.now

    clock.advance(50)
    router.dispatch(WeatherBroadcast(reading))

    assert registry.availability("600").last_seen_at == registered_at


def test_command_result_error_marks_offline(router, registry, connection):
    router.register_device("123", 25)

    router.dispatch(CommandResult(kind=CommandResultKind.SET_POSITION, snr="123", error="timeout"))
    assert registry.availability("123").online is False
    assert connection.payloads("warema/123/availability")[-1] == "offline"

    router.dispatch(CommandResult(kind=CommandResultKind.STOP, snr="123"))
    assert registry.availability("123").online is True


def test_router_rejects_unknown_event_types(router):
    with pytest.raises(TypeError):
        router.dispatch(object())
