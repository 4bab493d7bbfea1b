"""
CommandPlane - Event Router, command side

Bounded Context: Home Assistant commands → stick calls
Responsibilities:
  - Register the three command topics with a CommandRegistry
  - Translate each CommandRequest into stick calls
  - Publish optimistic motion states
  - Record every issued command as a liveness signal

    set=CLOSE        set_position(100), publish "closing"
    set=OPEN         set_position(0), publish "opening"
    set=STOP         stop
    set=ON|OFF       accepted, not supported by the stick
    set_position=N   set_position(N, current tilt), optimistic state
    set_tilt=A       set_position(current position, A)

Serial numbers are not validated here; the stick is the authority on
whether a device exists.

Threading:
  - Handlers run on the bridge dispatch thread (never in the paho thread)
"""

import logging
from typing import TYPE_CHECKING

from warema_mqtt.publishers import DeviceStatePublisher
from warema_mqtt.schemas import CommandKind, CommandRequest, MotionState, SetAction

from .registry import CommandRegistry, CommandNotAvailableError

if TYPE_CHECKING:
    from warema_bridge.availability import AvailabilityMonitor
    from warema_bridge.registry import DeviceRegistry
    from warema_bridge.stick import StickProtocol

logger = logging.getLogger(__name__)


class CommandPlane:
    """
    Executes inbound cover commands.

    Example:
        plane = CommandPlane(registry, monitor, stick, state_publisher)
        plane.handle(CommandRequest(snr="123456", kind=CommandKind.SET, action=SetAction.OPEN))
    """

    def __init__(
        self,
        registry: "DeviceRegistry",
        monitor: "AvailabilityMonitor",
        stick: "StickProtocol",
        state_publisher: DeviceStatePublisher,
    ):
        self.registry = registry
        self.monitor = monitor
        self.stick = stick
        self.state_publisher = state_publisher

        self.command_registry = CommandRegistry()
        self.command_registry.register(CommandKind.SET, self._handle_set, "Open, close or stop a cover")
        self.command_registry.register(CommandKind.SET_POSITION, self._handle_set_position, "Move to position 0-100")
        self.command_registry.register(CommandKind.SET_TILT, self._handle_set_tilt, "Set slat angle")

    def handle(self, request: CommandRequest) -> None:
        """Execute one command request; unknown commands are logged and ignored."""
        logger.debug(f"🎯 Executing {request.kind.value} for {request.snr}")
        try:
            self.command_registry.execute(request)
        except CommandNotAvailableError as e:
            logger.warning(f"⚠️ {e}")

    # ===== Handlers =====

    def _current_position(self, snr: str) -> int:
        device = self.registry.get(snr)
        return device.position if device is not None and device.position is not None else 0

    def _current_tilt(self, snr: str) -> int:
        device = self.registry.get(snr)
        return device.tilt if device is not None and device.tilt is not None else 0

    def _handle_set(self, request: CommandRequest) -> None:
        snr = request.snr
        action = request.action

        if action == SetAction.CLOSE:
            logger.debug(f"Closing {snr}")
            self.stick.set_position(snr, 100)
            self.state_publisher.publish_motion_state(snr, MotionState.CLOSING, retain=False)
        elif action == SetAction.OPEN:
            logger.debug(f"Opening {snr}")
            self.stick.set_position(snr, 0)
            self.state_publisher.publish_motion_state(snr, MotionState.OPENING, retain=False)
        elif action == SetAction.STOP:
            logger.debug(f"Stopping {snr}")
            self.stick.stop(snr)
        else:
            logger.info(f"Switching {snr} {action.value} is not supported by the stick, ignoring")
            return

        self.monitor.record_liveness(snr, alive=True)

    def _handle_set_position(self, request: CommandRequest) -> None:
        snr = request.snr
        target = request.value
        angle = self._current_tilt(snr)
        current = self._current_position(snr)

        logger.debug(f"Setting {snr} to {target}%, angle {angle}")
        self.stick.set_position(snr, target, angle)
        self.monitor.record_liveness(snr, alive=True)

        if target > current:
            self.state_publisher.publish_motion_state(snr, MotionState.CLOSING, retain=True)
        elif target < current:
            self.state_publisher.publish_motion_state(snr, MotionState.OPENING, retain=True)

    def _handle_set_tilt(self, request: CommandRequest) -> None:
        snr = request.snr
        angle = request.value
        position = self._current_position(snr)

        logger.debug(f"Setting {snr} to {angle}°, position {position}")
        self.stick.set_position(snr, position, angle)
        self.monitor.record_liveness(snr, alive=True)
