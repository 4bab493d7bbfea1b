"""
Reconciliation (all-or-nothing rescan) tests.
"""

from warema_mqtt.schemas import DeviceType
from warema_bridge.reconciliation import ReconciliationController


def test_no_rescan_when_everything_is_online(registry, stick):
    registry.register("1", DeviceType.RADIO_MOTOR)
    controller = ReconciliationController(registry, stick)

    assert controller.maybe_rescan() is False
    assert stick.calls == []
    assert len(registry) == 1


def test_rescan_tears_down_every_device(registry, stick):
    registry.register("1", DeviceType.RADIO_MOTOR)
    registry.register("2", DeviceType.RADIO_MOTOR)
    registry.register("3", DeviceType.WEATHER_STATION_ECO)
    registry.set_online("2", False)
    controller = ReconciliationController(registry, stick)

    assert controller.maybe_rescan("long-offline") is True

    assert sorted(args[0] for args in stick.calls_to("remove_device")) == ["1", "2", "3"]
    assert len(registry) == 0
    assert registry.availability_records() == []
    assert stick.calls[-1] == ("scan", (False,))
    assert controller.rescan_count == 1


def test_remove_failure_does_not_stop_rescan(registry, stick):
    registry.register("1", DeviceType.RADIO_MOTOR)
    registry.set_online("1", False)
    stick.failing.add("remove_device")
    controller = ReconciliationController(registry, stick)

    assert controller.maybe_rescan() is True
    assert len(registry) == 0
    assert stick.calls_to("scan") == [(False,)]
