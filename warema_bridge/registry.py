"""
Device Registry - sole owner of per-device state.

Holds every registered device together with its availability record
(online flag + last-seen time). The availability monitor and the
reconciliation controller receive the registry by reference and go through
the operations below; nothing else keeps device state.

Thread Safety:
- All mutations happen on the bridge's dispatch thread
- A lock still guards the dict so read helpers (stats, logging) can be
  called from other threads and see a consistent snapshot
"""

import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from warema_mqtt.schemas import DeviceType, MotionState

from warema_bridge.motion import derive_motion_state

Clock = Callable[[], float]


@dataclass
class Device:
    """
    One registered WMS device.

    Attributes:
        snr: Serial number (stable id)
        type: Product class
        position: 0 (open) .. 100 (closed), None until first report
        tilt: Slat angle, None until first report
        online: Current availability
        last_seen_at: Monotonic time of the last liveness signal
    """
    snr: str
    type: DeviceType
    position: Optional[int] = None
    tilt: Optional[int] = None
    online: bool = True
    last_seen_at: Optional[float] = None


@dataclass(frozen=True)
class AvailabilityRecord:
    """Availability view of one device."""
    snr: str
    online: bool
    last_seen_at: Optional[float]


class DeviceRegistry:
    """
    Registry of devices keyed by serial number.

    Usage:
        registry = DeviceRegistry()
        registry.register("123456", DeviceType.RADIO_MOTOR)
        state = registry.update_position("123456", 40, moving=True)
        registry.set_online("123456", False)
        registry.clear()
    """

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._devices: Dict[str, Device] = {}
        self._lock = threading.Lock()

    # ----- lifecycle -----

    def register(self, snr: str, device_type: DeviceType) -> Device:
        """
        Create or overwrite a device, seeded online with last_seen_at = now.

        Returns:
            A copy of the stored Device
        """
        device = Device(snr=snr, type=device_type, online=True, last_seen_at=self._clock())
        with self._lock:
            self._devices[snr] = device
            return replace(device)

    def get(self, snr: str) -> Optional[Device]:
        """Copy of the device, or None if it is not registered."""
        with self._lock:
            device = self._devices.get(snr)
            return replace(device) if device is not None else None

    def remove(self, snr: str) -> Optional[Device]:
        with self._lock:
            return self._devices.pop(snr, None)

    def clear(self) -> List[str]:
        """
        Drop every device and availability record in one step.

        Returns:
            Serial numbers that were registered
        """
        with self._lock:
            snrs = list(self._devices)
            self._devices.clear()
            return snrs

    # ----- mutations -----

    def update_position(self, snr: str, position: int, moving: bool) -> MotionState:
        """
        Store a new position and derive the motion label to publish.

        Raises:
            KeyError: Device not registered
        """
        with self._lock:
            device = self._devices[snr]
            previous = device.position
            device.position = position
        return derive_motion_state(position, previous, moving)

    def update_tilt(self, snr: str, angle: int) -> None:
        """
        Raises:
            KeyError: Device not registered
        """
        with self._lock:
            self._devices[snr].tilt = angle

    def set_online(self, snr: str, online: bool) -> Optional[bool]:
        """
        Apply an availability value.

        Going online refreshes last_seen_at (even when already online); going
        offline leaves it untouched.

        Returns:
            True if the flag flipped, False if unchanged, None if the device is
            not registered
        """
        with self._lock:
            device = self._devices.get(snr)
            if device is None:
                return None
            changed = device.online != online
            device.online = online
            if online:
                device.last_seen_at = self._clock()
            return changed

    # ----- reads -----

    def availability(self, snr: str) -> Optional[AvailabilityRecord]:
        with self._lock:
            device = self._devices.get(snr)
            if device is None:
                return None
            return AvailabilityRecord(snr, device.online, device.last_seen_at)

    def availability_records(self) -> List[AvailabilityRecord]:
        with self._lock:
            return [
                AvailabilityRecord(d.snr, d.online, d.last_seen_at)
                for d in self._devices.values()
            ]

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._devices)

    def offline_ids(self) -> List[str]:
        with self._lock:
            return [snr for snr, d in self._devices.items() if not d.online]

    def offline_count(self) -> int:
        return len(self.offline_ids())

    def snapshot(self) -> Dict[str, Dict]:
        """Plain-dict view for logging and diagnostics."""
        with self._lock:
            return {
                snr: {
                    'type': int(d.type),
                    'position': d.position,
                    'tilt': d.tilt,
                    'online': d.online,
                    'last_seen_at': d.last_seen_at,
                }
                for snr, d in self._devices.items()
            }

    def __contains__(self, snr: object) -> bool:
        with self._lock:
            return snr in self._devices

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)
