"""
Shared test doubles.

The bridge is exercised without a broker or a serial port: FakeConnection
records every publish, FakeStick records every driver call, and FakeClock
lets tests move time by hand.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from warema_mqtt import create_logger
from warema_mqtt.publishers import DeviceStatePublisher, DiscoveryPublisher

from warema_bridge.availability import AvailabilityMonitor
from warema_bridge.config import BridgeConfig
from warema_bridge.registry import DeviceRegistry
from warema_bridge.service import BridgeService
from warema_bridge.stick import StickError, StickProtocol


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeConnection:
    """Stands in for MQTTConnection; publishes are dropped while disconnected."""

    def __init__(self):
        self.messages: List[Tuple[str, str, bool]] = []
        self.handler = None
        self.connect_handler = None
        self.connected = False
        self.disconnected = False

    def publish(self, topic: str, payload: str, retain: bool = False) -> bool:
        if not self.connected:
            return False
        self.messages.append((topic, payload, retain))
        return True

    def is_connected(self) -> bool:
        return self.connected

    def set_message_handler(self, handler) -> None:
        self.handler = handler

    def set_connect_handler(self, handler) -> None:
        self.connect_handler = handler

    def connect(self, timeout: float = 10.0) -> bool:
        self.connected = True
        if self.connect_handler is not None:
            self.connect_handler()
        return True

    def drop(self) -> None:
        """Simulate a broker outage."""
        self.connected = False

    def disconnect(self) -> None:
        self.connected = False
        self.disconnected = True

    def payloads(self, topic: str) -> List[str]:
        return [payload for t, payload, _ in self.messages if t == topic]

    def retained(self, topic: str) -> List[bool]:
        return [retain for t, _, retain in self.messages if t == topic]

    def topics(self) -> List[str]:
        return [t for t, _, _ in self.messages]

    def clear(self) -> None:
        self.messages.clear()


class FakeStick(StickProtocol):
    """Records driver calls; methods listed in ``failing`` raise StickError."""

    def __init__(self, callback=None):
        self.callback = callback
        self.calls: List[Tuple[str, tuple]] = []
        self.failing: set = set()
        self.closed = False

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if name in self.failing:
            raise StickError(f"{name} failed")

    def calls_to(self, name: str) -> List[tuple]:
        return [args for called, args in self.calls if called == name]

    def add_device(self, snr: str, name: str) -> None:
        self._record('add_device', snr, name)

    def remove_device(self, snr: str) -> None:
        self._record('remove_device', snr)

    def scan(self, auto_assign_blinds: bool = False) -> None:
        self._record('scan', auto_assign_blinds)

    def set_position(self, snr: str, position: int, angle: Optional[int] = None) -> None:
        self._record('set_position', snr, position, angle)

    def stop(self, snr: str) -> None:
        self._record('stop', snr)

    def get_position(self, snr: str, cmd_confirmation: bool = False, callback_on_unchanged_pos: bool = False) -> None:
        self._record('get_position', snr, cmd_confirmation, callback_on_unchanged_pos)

    def probe_wave(self, snr: str) -> None:
        self._record('probe_wave', snr)

    def set_poll_intervals(self, position_interval_ms: int, moving_interval_ms: int) -> None:
        self._record('set_poll_intervals', position_interval_ms, moving_interval_ms)

    def enable_command_confirmation(self, enabled: bool) -> None:
        self._record('enable_command_confirmation', enabled)

    def list_devices(self) -> List[Dict[str, Any]]:
        return [{'snr': args[0]} for args in self.calls_to('add_device')]

    def close(self) -> None:
        self.closed = True

    def emit(self, topic: str, payload: Any = None, error: Optional[Exception] = None) -> None:
        """Deliver a driver message the way a real driver would."""
        self.callback(error, topic, payload)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def connection():
    conn = FakeConnection()
    conn.connected = True
    return conn


@pytest.fixture
def stick():
    return FakeStick()


@pytest.fixture
def registry(clock):
    return DeviceRegistry(clock=clock)


@pytest.fixture
def state_publisher(connection):
    return DeviceStatePublisher(connection, create_logger("test"))


@pytest.fixture
def discovery_publisher(connection):
    return DiscoveryPublisher(connection, create_logger("test"))


@pytest.fixture
def monitor(registry, stick, state_publisher, clock):
    # 300 s, the AVAILABILITY_TIMEOUT default
    return AvailabilityMonitor(registry, stick, state_publisher, timeout=300.0, clock=clock)


def build_service(config: BridgeConfig, connection, clock) -> Tuple[BridgeService, FakeStick]:
    stick = FakeStick()

    def factory(callback):
        stick.callback = callback
        return stick

    service = BridgeService(config=config, connection=connection, stick_factory=factory, clock=clock)
    return service, stick


@pytest.fixture
def service(connection, clock):
    return build_service(BridgeConfig(), connection, clock)
