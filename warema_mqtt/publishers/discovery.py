"""
Discovery Publisher
===================

Bounded Context: Home Assistant Discovery

Publishes the retained discovery configs built by
``schemas.discovery.build_discovery_configs``.

Message Flow:
    Registry.register → DiscoveryPublisher → homeassistant/<component>/.../config
"""

from typing import Dict

from .base import BasePublisher
from ..schemas import DeviceType, build_discovery_configs
from ..logging import LogEvent


class DiscoveryPublisher(BasePublisher):
    """Publisher for Home Assistant discovery configs."""

    def format_message(self, snr: str, device_type: DeviceType) -> Dict[str, str]:
        """
        Format every discovery message for one device.

        Returns:
            Map of discovery topic → JSON payload
        """
        return {
            config.topic: config.to_json()
            for config in build_discovery_configs(snr, device_type)
        }

    def publish_device(self, snr: str, device_type: DeviceType) -> bool:
        """
        Publish discovery configs for a freshly registered device.

        Returns:
            True if every config was accepted by the connection
        """
        messages = self.format_message(snr, device_type)
        if not messages:
            return False

        ok = self.publish_many(messages, retain=True)
        self.logger.info(
            event=LogEvent.DEVICE_DISCOVERY_PUBLISHED,
            message=f"Published discovery config for {snr}",
            metadata={
                'snr': snr,
                'type': int(device_type),
                'topics': list(messages),
                'success': ok,
            }
        )
        return ok
