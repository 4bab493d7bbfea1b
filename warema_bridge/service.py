"""
Bridge Service - single dispatch loop wiring stick, registry and MQTT.

This module provides the BridgeService class which owns every bridge
component and the one thread that is allowed to mutate device state.

Architecture:
- Stick driver callback → parse_stick_message → queue
- MQTT on_message → CommandSubscriber → CommandRequest → queue
- MQTT on_connect → BrokerConnected → queue (retained state republished)
- Periodic tasks / one-shot follow-ups → TimerFired / FollowUpDue → queue
- Dispatch thread drains the queue and runs exactly one handler at a time

Threading Model:
- Stick driver thread(s) (driver internal, only enqueue)
- paho-mqtt network thread (only enqueues)
- Timer threads (TaskSupervisor, only enqueue)
- Dispatch Thread (our thread, sole mutator of the registry)
"""

import logging
import queue
import threading
import time
from typing import Any, Callable, Optional, Union

from warema_mqtt import CommandRequest, CommandSubscriber, create_logger
from warema_mqtt.publishers import DeviceStatePublisher, DiscoveryPublisher

from warema_control import CommandPlane

from warema_bridge.availability import AvailabilityMonitor
from warema_bridge.config import BridgeConfig
from warema_bridge.events import (
    BrokerConnected,
    FollowUpDue,
    InternalEvent,
    MalformedEventError,
    StickEvent,
    TimerFired,
    parse_stick_message,
)
from warema_bridge.reconciliation import ReconciliationController
from warema_bridge.registry import DeviceRegistry
from warema_bridge.router import EventRouter
from warema_bridge.scheduler import TaskSupervisor
from warema_bridge.stick import StickCallback, StickProtocol

logger = logging.getLogger(__name__)

WorkItem = Union[StickEvent, InternalEvent, CommandRequest]

TASK_AVAILABILITY = "availability"
TASK_WAKE_UP = "wake_up"
TASK_RESCAN = "rescan"

FOLLOW_UP_DELAY = 1.0


class DetachedConnection:
    """Publish target used when no broker is configured (network discovery mode)."""

    def publish(self, topic: str, payload: str, retain: bool = False) -> bool:
        logger.debug(f"No MQTT session, dropping {topic}={payload}")
        return False

    def is_connected(self) -> bool:
        return False


class BridgeService:
    """
    Main bridge service.

    Usage:
        config = BridgeConfig.from_env()
        connection = MQTTConnection(...)
        driver_cls = load_driver(config.wms_config.driver)

        service = BridgeService(
            config=config,
            connection=connection,
            stick_factory=lambda callback: driver_cls(
                config.wms_config.serial_port,
                config.wms_config.channel,
                config.wms_config.pan_id,
                config.wms_config.key,
                callback,
            ),
        )
        service.start()
        service.wait()  # Blocks until stop()

    Args:
        config: Bridge configuration
        connection: MQTT session (MQTTConnection or a test double), or None
            to run without a broker
        stick_factory: Builds the stick driver around the service's callback
        clock: Monotonic clock shared by registry and monitor
    """

    def __init__(
        self,
        config: BridgeConfig,
        connection,  # MQTTConnection
        stick_factory: Callable[[StickCallback], StickProtocol],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.connection = connection
        target = connection if connection is not None else DetachedConnection()

        # Publishers
        self.state_publisher = DeviceStatePublisher(target, create_logger("state_publisher", config.logging_level))
        self.discovery_publisher = DiscoveryPublisher(target, create_logger("discovery_publisher", config.logging_level))
        self.subscriber = CommandSubscriber(
            on_command=self.submit,
            logger=create_logger("subscriber", config.logging_level),
        )

        # Work queue (stick callback may fire as soon as the driver exists)
        self.work_queue: "queue.Queue[WorkItem]" = queue.Queue()
        self.stick = stick_factory(self.on_stick_message)

        # Core
        self.registry = DeviceRegistry(clock=clock)
        self.monitor = AvailabilityMonitor(
            registry=self.registry,
            stick=self.stick,
            publisher=self.state_publisher,
            timeout=config.availability_timeout_seconds,
            clock=clock,
        )
        self.controller = ReconciliationController(self.registry, self.stick)
        self.supervisor = TaskSupervisor()
        self.router = EventRouter(
            config=config,
            registry=self.registry,
            monitor=self.monitor,
            stick=self.stick,
            state_publisher=self.state_publisher,
            discovery_publisher=self.discovery_publisher,
            start_timers=self.start_timers,
        )
        self.command_plane = CommandPlane(
            registry=self.registry,
            monitor=self.monitor,
            stick=self.stick,
            state_publisher=self.state_publisher,
        )

        # Lifecycle state
        self.dispatch_thread: Optional[threading.Thread] = None
        self.stop_event = threading.Event()
        self._running = False
        self._dispatched = 0
        self._errors = 0

        if connection is not None:
            connection.set_connect_handler(self.on_broker_connected)

    # ─────────────────────────────────────────────────────────────────────
    # Inbound (any thread)
    # ─────────────────────────────────────────────────────────────────────

    def on_stick_message(self, error: Optional[Exception], topic: Optional[str], payload: Any = None) -> None:
        """
        Stick driver callback (driver thread).

        Parses the message and enqueues the typed event; malformed messages
        are logged and dropped.
        """
        if error is not None:
            logger.error(f"Stick error: {error}")
            return
        if topic is None:
            logger.warning(f"Stick message without topic dropped: {payload!r}")
            return

        try:
            event = parse_stick_message(topic, payload)
        except MalformedEventError as e:
            logger.warning(f"Malformed stick message dropped: {e}")
            return

        self.submit(event)

    def on_broker_connected(self) -> None:
        """MQTT connect callback (paho thread)."""
        self.submit(BrokerConnected())

    def submit(self, item: WorkItem) -> None:
        """Enqueue one work item for the dispatch thread."""
        self.work_queue.put(item)

    # ─────────────────────────────────────────────────────────────────────
    # Dispatch (dispatch thread)
    # ─────────────────────────────────────────────────────────────────────

    def dispatch(self, item: WorkItem) -> None:
        """
        Run the handler for one work item.

        Called only from the dispatch thread, or directly in tests.
        """
        if isinstance(item, CommandRequest):
            self.command_plane.handle(item)
        elif isinstance(item, TimerFired):
            self._handle_timer(item)
        elif isinstance(item, FollowUpDue):
            self.monitor.follow_up(item.snrs)
        elif isinstance(item, BrokerConnected):
            self.republish_state()
        else:
            self.router.dispatch(item)

    def republish_state(self) -> int:
        """
        Publish discovery, availability, position and tilt for every device.

        Publishes made while the broker was unreachable are lost, and
        availability is only published on a change, so the broker's
        retained view is rebuilt from the registry after each connect.

        Returns:
            Number of devices republished
        """
        count = 0
        for snr in self.registry.ids():
            device = self.registry.get(snr)
            if device is None:
                continue
            self.discovery_publisher.publish_device(snr, device.type)
            self.state_publisher.publish_availability(snr, online=device.online)
            if device.position is not None:
                self.state_publisher.publish_position(snr, device.position)
            if device.tilt is not None:
                self.state_publisher.publish_tilt(snr, device.tilt)
            count += 1

        if count:
            logger.info(f"Republished state for {count} devices after MQTT connect")
        return count

    def _handle_timer(self, item: TimerFired) -> None:
        if item.task == TASK_AVAILABILITY:
            if self.monitor.evaluate():
                self.controller.maybe_rescan("long-offline")
        elif item.task == TASK_WAKE_UP:
            probed = self.monitor.wake_up()
            if probed:
                self.supervisor.call_later(
                    FOLLOW_UP_DELAY,
                    lambda: self.submit(FollowUpDue(snrs=tuple(probed))),
                )
        elif item.task == TASK_RESCAN:
            self.controller.maybe_rescan("periodic")
        else:
            logger.warning(f"Unknown timer task '{item.task}'")

    def _dispatch_loop(self) -> None:
        logger.info("Dispatch loop started")

        while not self.stop_event.is_set():
            try:
                item = self.work_queue.get(timeout=0.1)
            except queue.Empty:
                continue

            try:
                self.dispatch(item)
                self._dispatched += 1
            except Exception as e:
                self._errors += 1
                logger.error(f"Error dispatching {type(item).__name__}: {e}", exc_info=True)

        logger.info("Dispatch loop stopped")

    # ─────────────────────────────────────────────────────────────────────
    # Timers
    # ─────────────────────────────────────────────────────────────────────

    def start_timers(self) -> None:
        """(Re)start the availability, wake-up and rescan tasks."""
        self.supervisor.start({
            TASK_AVAILABILITY: (
                self.config.availability_check_seconds,
                lambda: self.submit(TimerFired(TASK_AVAILABILITY)),
            ),
            TASK_WAKE_UP: (
                self.config.wake_up_interval_seconds,
                lambda: self.submit(TimerFired(TASK_WAKE_UP)),
            ),
            TASK_RESCAN: (
                self.config.rescan_interval_seconds,
                lambda: self.submit(TimerFired(TASK_RESCAN)),
            ),
        })

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────

    def start(self, connect_timeout: float = 10.0) -> None:
        """
        Start the bridge (non-blocking).

        Lifecycle:
        1. Connect MQTT (a timeout is not fatal, paho keeps retrying)
        2. Start the dispatch thread
        """
        if self._running:
            logger.warning("Service already running")
            return

        logger.info("Starting Warema bridge service")

        if self.connection is not None:
            self.connection.set_message_handler(self.subscriber.handle_message)
            if not self.connection.connect(timeout=connect_timeout):
                logger.warning("MQTT broker not reachable yet, continuing")
        else:
            logger.info("Running without MQTT (network discovery mode)")

        self.stop_event.clear()
        self.dispatch_thread = threading.Thread(
            target=self._dispatch_loop,
            name="DispatchThread",
            daemon=True,
        )
        self.dispatch_thread.start()
        self._running = True

        logger.info("✅ Warema bridge service started")

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until stop() is called."""
        if not self._running:
            logger.warning("Service not running")
            return

        try:
            self.stop_event.wait(timeout=timeout)
        except KeyboardInterrupt:
            logger.info("Received KeyboardInterrupt, stopping...")
            self.stop()

    def stop(self) -> None:
        """
        Stop the bridge gracefully.

        Lifecycle:
        1. Stop the dispatch thread
        2. Cancel all timers
        3. Close the stick
        4. Publish offline bridge state and disconnect MQTT
        """
        if not self._running:
            logger.warning("Service not running")
            return

        logger.info("Stopping Warema bridge service")

        # Timers are cancelled after the join; InitCompleted may restart them
        self.stop_event.set()
        if self.dispatch_thread and self.dispatch_thread is not threading.current_thread():
            self.dispatch_thread.join(timeout=5.0)

        self.supervisor.cancel_all()

        try:
            self.stick.close()
        except Exception as e:
            logger.error(f"Error closing stick: {e}")

        if self.connection is not None:
            self.connection.disconnect()

        self._running = False
        logger.info("✅ Warema bridge service stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    def get_stats(self) -> dict:
        return {
            'devices': len(self.registry),
            'offline': self.registry.offline_count(),
            'dispatched': self._dispatched,
            'errors': self._errors,
            'queued': self.work_queue.qsize(),
            'rescans': self.controller.rescan_count,
            'timers': self.supervisor.task_names,
        }
