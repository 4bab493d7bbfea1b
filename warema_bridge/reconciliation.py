"""
Reconciliation Controller - full teardown and re-scan.

When any device is offline, every tracked device is removed from the stick,
the registry is cleared, and a fresh scan is requested. Scan results come
back through the normal registration path. There is no partial
reconciliation: devices that are healthy at that moment are torn down too.
"""

import logging

from warema_bridge.registry import DeviceRegistry
from warema_bridge.stick import StickProtocol

logger = logging.getLogger(__name__)


class ReconciliationController:
    """
    Runs the all-or-nothing rescan.

    Args:
        registry: Shared device registry
        stick: Stick driver
    """

    def __init__(self, registry: DeviceRegistry, stick: StickProtocol):
        self.registry = registry
        self.stick = stick
        self.rescan_count = 0

    def maybe_rescan(self, reason: str = "periodic") -> bool:
        """
        Rescan if at least one device is offline.

        Args:
            reason: Short label for the log line ("periodic", "long-offline")

        Returns:
            True if a rescan was started
        """
        logger.info(f"Performing device re-scan check ({reason})")

        offline = self.registry.offline_ids()
        if not offline:
            logger.debug("All devices are online, skipping re-scan")
            return False

        logger.info(f"Found {len(offline)} offline devices, performing re-scan")

        for snr in self.registry.ids():
            logger.debug(f"Clearing registration for device {snr}")
            try:
                self.stick.remove_device(snr)
            except Exception as e:
                logger.error(f"Error removing device {snr} from stick: {e}")

        cleared = self.registry.clear()
        logger.info(f"Cleared {len(cleared)} devices, scanning")

        self.stick.scan(auto_assign_blinds=False)
        self.rescan_count += 1
        return True
