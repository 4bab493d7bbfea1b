"""
Device State Publisher
======================

Bounded Context: Device State Production

Publishes everything Home Assistant reads about a device: availability,
position, tilt, motion state, weather telemetry and the bridge's own state.

Retain policy:
    availability, position, tilt, weather  retained
    motion state                           caller decides (optimistic
                                           OPEN/CLOSE echoes are not retained)
    bridge state                           retained (mirrors the last will)

Example:
    >>> publisher = DeviceStatePublisher(connection, logger)
    >>> publisher.publish_availability("123456", online=False)
    >>> publisher.publish_motion_state("123456", MotionState.CLOSING, retain=True)
"""

from typing import Dict, Optional

from .base import BasePublisher
from ..schemas import MotionState, WeatherReading
from ..schemas import topics
from ..logging import LogEvent


class DeviceStatePublisher(BasePublisher):
    """
    Publisher for per-device state topics.

    Availability publication is edge-triggered by the caller; this class
    publishes whatever it is asked to.
    """

    def format_message(
        self,
        snr: str,
        position: Optional[int] = None,
        tilt: Optional[int] = None,
    ) -> Dict[str, str]:
        """
        Format position/tilt topics for one device.

        Example:
            >>> publisher.format_message("123456", position=40)
            {'warema/123456/position': '40'}
        """
        messages = {}
        if position is not None:
            messages[topics.position_topic(snr)] = str(position)
        if tilt is not None:
            messages[topics.tilt_topic(snr)] = str(tilt)
        return messages

    def publish_position(self, snr: str, position: int) -> bool:
        ok = self.publish_many(self.format_message(snr, position=position), retain=True)
        self.logger.debug(
            event=LogEvent.DEVICE_STATE_PUBLISHED,
            message="Published position",
            metadata={'snr': snr, 'position': position}
        )
        return ok

    def publish_tilt(self, snr: str, tilt: int) -> bool:
        ok = self.publish_many(self.format_message(snr, tilt=tilt), retain=True)
        self.logger.debug(
            event=LogEvent.DEVICE_STATE_PUBLISHED,
            message="Published tilt",
            metadata={'snr': snr, 'tilt': tilt}
        )
        return ok

    def publish_motion_state(self, snr: str, state: MotionState, retain: bool = True) -> bool:
        ok = self.publish(topics.state_topic(snr), state.value, retain=retain)
        self.logger.debug(
            event=LogEvent.DEVICE_STATE_PUBLISHED,
            message="Published motion state",
            metadata={'snr': snr, 'state': state.value, 'retain': retain}
        )
        return ok

    def publish_availability(self, snr: str, online: bool) -> bool:
        payload = topics.PAYLOAD_ONLINE if online else topics.PAYLOAD_OFFLINE
        ok = self.publish(topics.availability_topic(snr), payload, retain=True)
        if online:
            self.logger.info(
                event=LogEvent.DEVICE_AVAILABILITY_CHANGED,
                message=f"Device {snr} is now online",
                metadata={'snr': snr, 'online': True}
            )
        else:
            self.logger.warning(
                event=LogEvent.DEVICE_AVAILABILITY_CHANGED,
                message=f"Device {snr} is now offline",
                metadata={'snr': snr, 'online': False}
            )
        return ok

    def publish_weather(self, reading: WeatherReading) -> bool:
        ok = self.publish_many(reading.to_state_payloads(), retain=True)
        self.logger.debug(
            event=LogEvent.WEATHER_PUBLISHED,
            message="Published weather broadcast",
            metadata={
                'snr': reading.snr,
                'lumen': reading.lumen,
                'temp': reading.temp,
                'wind': reading.wind,
                'rain': reading.rain,
            }
        )
        return ok

    def publish_bridge_state(self, online: bool) -> bool:
        payload = topics.PAYLOAD_ONLINE if online else topics.PAYLOAD_OFFLINE
        ok = self.publish(topics.BRIDGE_STATE_TOPIC, payload, retain=True)
        self.logger.debug(
            event=LogEvent.BRIDGE_STATE_PUBLISHED,
            message=f"Bridge state {payload}",
        )
        return ok
