"""
Availability Monitor - liveness evaluation and wake-up probing.

Three entry points, all called from the dispatch thread:

- record_liveness(): a positive (or negative) liveness signal for a device
- evaluate(): periodic staleness check, every availability_timeout / 2
- wake_up(): periodic probe of every offline device

Availability publication is edge-triggered: ``warema/<snr>/availability``
is only published when the registry reports that the flag flipped.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional

from warema_mqtt.publishers import DeviceStatePublisher

from warema_bridge.registry import DeviceRegistry
from warema_bridge.stick import StickProtocol

logger = logging.getLogger(__name__)


class AvailabilityMonitor:
    """
    Tracks device liveness against a timeout.

    A device goes offline when strictly more than ``timeout`` seconds have
    passed since its last liveness signal, or when the stick reports a
    command error for it. It comes back online only on a new liveness
    signal; probes never change state by themselves.

    Args:
        registry: Shared device registry
        stick: Stick driver (probes)
        publisher: State publisher (availability topic)
        timeout: Availability timeout in seconds
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        registry: DeviceRegistry,
        stick: StickProtocol,
        publisher: DeviceStatePublisher,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")
        self.registry = registry
        self.stick = stick
        self.publisher = publisher
        self.timeout = timeout
        self._clock = clock

    @property
    def evaluation_interval(self) -> float:
        return self.timeout / 2

    def record_liveness(self, snr: str, alive: bool = True) -> bool:
        """
        Apply a liveness signal.

        Args:
            snr: Device serial number
            alive: True for a successful report/ack/issued command, False for
                an error reported by the stick

        Returns:
            True if availability flipped (and was published)
        """
        changed = self.registry.set_online(snr, alive)
        if changed is None:
            logger.debug(f"Liveness signal for unregistered device {snr} ignored")
            return False
        if changed:
            self.publisher.publish_availability(snr, online=alive)
        return changed

    def evaluate(self, now: Optional[float] = None) -> bool:
        """
        Mark stale devices offline.

        Args:
            now: Monotonic time (defaults to the clock)

        Returns:
            True if any device has been silent for more than twice the
            timeout, i.e. a rescan should be attempted
        """
        now = self._clock() if now is None else now
        long_offline = False

        for record in self.registry.availability_records():
            if record.last_seen_at is None:
                continue
            silence = now - record.last_seen_at
            if silence <= self.timeout:
                continue

            if self.registry.set_online(record.snr, False):
                logger.warning(
                    f"Device {record.snr} silent for {silence:.0f}s, marking offline"
                )
                self.publisher.publish_availability(record.snr, online=False)

            if silence > self.timeout * 2:
                long_offline = True

        if long_offline:
            logger.warning("Some devices have been offline for an extended period, re-scan suggested")
        return long_offline

    def wake_up(self, now: Optional[float] = None) -> List[str]:
        """
        Probe every offline device with a wave request.

        Failures are logged and never raised.

        Returns:
            Serial numbers that were probed
        """
        offline = self.registry.offline_ids()
        total = len(self.registry)
        probed = []

        for snr in offline:
            logger.debug(f"Attempting to wake up device {snr}")
            try:
                self.stick.probe_wave(snr)
                probed.append(snr)
            except Exception as e:
                logger.error(f"Error waking up device {snr}: {e}")

        if offline and len(offline) >= total / 2:
            logger.warning(
                f"{len(offline)} of {total} devices are offline; "
                f"waiting for the availability check to decide on a re-scan"
            )
        return probed

    def follow_up(self, snrs: Iterable[str]) -> List[str]:
        """
        Query the position of probed devices that are still offline.

        Returns:
            Serial numbers that were queried
        """
        queried = []
        for snr in snrs:
            record = self.registry.availability(snr)
            if record is None or record.online:
                continue
            logger.debug(f"Trying position request for device {snr}")
            try:
                self.stick.get_position(snr, cmd_confirmation=False, callback_on_unchanged_pos=False)
                queried.append(snr)
            except Exception as e:
                logger.error(f"Error requesting position of device {snr}: {e}")
        return queried
