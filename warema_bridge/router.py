"""
Event Router - protocol side.

Dispatches typed stick events to the registry, the availability monitor and
the publishers. Every StickEvent class has exactly one handler; the mapping
is checked when the router is built.

    InitCompleted     configure stick, start timers, scan
    ScannedDevices    register scan results (or the forced list instead)
    WeatherBroadcast  auto-register station, publish telemetry
    PositionUpdate    auto-register, liveness, position/state/tilt
    CommandResult     liveness from the stick's acknowledgement
    UnknownMessage    log

Device registration lives here too, since scan results, weather broadcasts
and position updates all register devices the same way.
"""

import json
import logging
from typing import Callable, Dict, Optional, Type, get_args

from warema_mqtt.publishers import DeviceStatePublisher, DiscoveryPublisher
from warema_mqtt.schemas import (
    DEFAULT_DEVICE_TYPE,
    IGNORED_TYPES,
    DeviceType,
    lookup_device_type,
)

from warema_bridge.availability import AvailabilityMonitor
from warema_bridge.config import BridgeConfig
from warema_bridge.events import (
    CommandResult,
    InitCompleted,
    PositionUpdate,
    ScannedDevices,
    StickEvent,
    UnknownMessage,
    WeatherBroadcast,
)
from warema_bridge.registry import Device, DeviceRegistry
from warema_bridge.stick import StickProtocol

logger = logging.getLogger(__name__)


class EventRouter:
    """
    Protocol-side state machine of the bridge.

    Args:
        config: Bridge configuration (intervals, ignored/forced devices)
        registry: Shared device registry
        monitor: Availability monitor (liveness signals)
        stick: Stick driver
        state_publisher: Device state publisher
        discovery_publisher: Home Assistant discovery publisher
        start_timers: Called once the stick reports init completion
    """

    def __init__(
        self,
        config: BridgeConfig,
        registry: DeviceRegistry,
        monitor: AvailabilityMonitor,
        stick: StickProtocol,
        state_publisher: DeviceStatePublisher,
        discovery_publisher: DiscoveryPublisher,
        start_timers: Callable[[], None],
    ):
        self.config = config
        self.registry = registry
        self.monitor = monitor
        self.stick = stick
        self.state_publisher = state_publisher
        self.discovery_publisher = discovery_publisher
        self.start_timers = start_timers

        self._handlers: Dict[Type, Callable] = {
            InitCompleted: self._handle_init_completed,
            ScannedDevices: self._handle_scanned_devices,
            WeatherBroadcast: self._handle_weather_broadcast,
            PositionUpdate: self._handle_position_update,
            CommandResult: self._handle_command_result,
            UnknownMessage: self._handle_unknown,
        }
        missing = set(get_args(StickEvent)) - set(self._handlers)
        if missing:
            raise TypeError(f"No handler for events: {sorted(t.__name__ for t in missing)}")

    def dispatch(self, event: StickEvent) -> None:
        """Run the handler for one stick event, then refresh the bridge state."""
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")
        handler(event)
        self.state_publisher.publish_bridge_state(online=True)

    # ─────────────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────────────

    def register_device(self, snr: str, type_code: int) -> Optional[Device]:
        """
        Register one device by type.

        Ignored types (remotes, web control), unknown types and serial
        numbers on the ignore list are logged and skipped. Weather stations
        bypass the ignore list and are not added to the stick; every other
        exposed type is.

        Returns:
            The registered Device, or None if registration was skipped
        """
        device_type = lookup_device_type(type_code)
        if device_type is None:
            logger.info(f"Unrecognized device type {type_code} for {snr}")
            return None
        if device_type in IGNORED_TYPES:
            logger.debug(f"Skipping {device_type.name} {snr}")
            return None
        if device_type != DeviceType.WEATHER_STATION_ECO and self.config.is_ignored(snr):
            logger.info(f"Ignoring and removing device {snr} (type {int(device_type)})")
            return None

        logger.info(f"Adding device {snr} (type {int(device_type)})")
        if device_type != DeviceType.WEATHER_STATION_ECO:
            self.stick.add_device(snr, snr)

        device = self.registry.register(snr, device_type)
        self.state_publisher.publish_availability(snr, online=True)
        self.discovery_publisher.publish_device(snr, device_type)
        return device

    # ─────────────────────────────────────────────────────────────────────
    # Handlers
    # ─────────────────────────────────────────────────────────────────────

    def _handle_init_completed(self, event: InitCompleted) -> None:
        logger.info("Warema init completed")

        self.stick.set_poll_intervals(self.config.polling_interval, self.config.moving_interval)
        self.stick.enable_command_confirmation(True)

        self.start_timers()

        logger.info("Scanning...")
        self.stick.scan(auto_assign_blinds=False)

    def _handle_scanned_devices(self, event: ScannedDevices) -> None:
        logger.info(f"Scanned devices: {[(d.snr, d.type) for d in event.devices]}")

        if self.config.forced_devices:
            for forced in self.config.forced_devices:
                self.register_device(forced.snr, forced.type)
        else:
            for scanned in event.devices:
                self.register_device(scanned.snr, scanned.type)

        logger.info(f"Registered devices:\n{json.dumps(self.stick.list_devices(), indent=2, default=str)}")

    def _handle_weather_broadcast(self, event: WeatherBroadcast) -> None:
        logger.debug(f"Weather broadcast: {event.reading}")

        # TODO: count broadcasts as liveness once the availability timeout can
        # be set per device type; a silent station currently goes offline and
        # triggers a long-offline rescan of every blind.
        if event.snr not in self.registry:
            self.register_device(event.snr, DeviceType.WEATHER_STATION_ECO)

        self.state_publisher.publish_weather(event.reading)

    def _handle_position_update(self, event: PositionUpdate) -> None:
        logger.debug(f"Position update: {event}")

        if event.snr not in self.registry:
            logger.info(f"Auto-registering unknown device {event.snr} from position update")
            self.register_device(event.snr, DEFAULT_DEVICE_TYPE)

        if event.snr not in self.registry:
            logger.error(f"Failed to register device {event.snr} for position update")
            return

        self.monitor.record_liveness(event.snr, alive=True)

        if event.position is not None:
            state = self.registry.update_position(event.snr, event.position, event.moving)
            self.state_publisher.publish_position(event.snr, event.position)
            self.state_publisher.publish_motion_state(event.snr, state, retain=True)

        if event.angle is not None:
            self.registry.update_tilt(event.snr, event.angle)
            self.state_publisher.publish_tilt(event.snr, event.angle)

    def _handle_command_result(self, event: CommandResult) -> None:
        if event.succeeded:
            self.monitor.record_liveness(event.snr, alive=True)
        else:
            logger.warning(f"Command {event.kind.value} failed for device {event.snr}: {event.error}")
            self.monitor.record_liveness(event.snr, alive=False)

    def _handle_unknown(self, event: UnknownMessage) -> None:
        logger.info(f"UNKNOWN MESSAGE: {event.topic} {event.payload!r}")
