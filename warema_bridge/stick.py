"""
WMS stick interface.

The radio stick driver (serial framing, network join, scanning) is an
external component. The bridge drives it only through StickProtocol, and
receives everything back through a single ``StickCallback``.

A driver class is constructed as::

    driver_cls(serial_port, channel, pan_id, key, callback)

and is located at runtime from a ``module:Class`` path (``WMS_DRIVER``).
"""

import importlib
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type

# callback(error, topic, payload); error is None on success
StickCallback = Callable[[Optional[Exception], Optional[str], Any], None]


class StickError(Exception):
    """Raised by drivers when a command cannot be handed to the stick."""
    pass


class DriverLoadError(Exception):
    """Raised when the configured driver path cannot be imported."""
    pass


class StickProtocol(ABC):
    """
    Capabilities the bridge needs from a WMS stick driver.

    Every call is fire-and-forget: results come back later through the
    callback as ``wms-vb-*`` messages.
    """

    @abstractmethod
    def add_device(self, snr: str, name: str) -> None:
        """Start tracking a blind (position polling, commands)."""

    @abstractmethod
    def remove_device(self, snr: str) -> None:
        """Stop tracking a blind."""

    @abstractmethod
    def scan(self, auto_assign_blinds: bool = False) -> None:
        """Scan the network; reported as ``wms-vb-scanned-devices``."""

    @abstractmethod
    def set_position(self, snr: str, position: int, angle: Optional[int] = None) -> None:
        """Move a blind to position (0..100) and optionally tilt."""

    @abstractmethod
    def stop(self, snr: str) -> None:
        """Stop a moving blind."""

    @abstractmethod
    def get_position(
        self,
        snr: str,
        cmd_confirmation: bool = False,
        callback_on_unchanged_pos: bool = False,
    ) -> None:
        """Query the current position without moving the blind."""

    @abstractmethod
    def probe_wave(self, snr: str) -> None:
        """Send a wave request (blind jogs briefly); used to wake devices."""

    @abstractmethod
    def set_poll_intervals(self, position_interval_ms: int, moving_interval_ms: int) -> None:
        """Configure position polling and moving-blind watch intervals."""

    @abstractmethod
    def enable_command_confirmation(self, enabled: bool) -> None:
        """Report ``wms-vb-cmd-result-*`` messages for every command."""

    @abstractmethod
    def list_devices(self) -> List[Dict[str, Any]]:
        """Devices currently tracked by the driver."""

    def close(self) -> None:
        """Release the serial port. Optional for drivers."""


def load_driver(path: str) -> Type[StickProtocol]:
    """
    Import a driver class from ``package.module:ClassName``.

    Raises:
        DriverLoadError: Malformed path, import failure, or missing class
    """
    module_name, sep, class_name = path.partition(':')
    if not sep or not module_name or not class_name:
        raise DriverLoadError(f"Driver path must look like 'module:Class', got '{path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise DriverLoadError(f"Cannot import driver module '{module_name}': {e}") from e

    driver_cls = getattr(module, class_name, None)
    if driver_cls is None:
        raise DriverLoadError(f"Module '{module_name}' has no attribute '{class_name}'")
    return driver_cls
