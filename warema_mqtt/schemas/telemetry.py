"""
Weather Telemetry Schema
========================

Bounded Context: Weather Station Data

A weather broadcast from a WMS weather station is fanned out into four
retained state topics.
"""

from dataclasses import dataclass
from typing import Dict, Union

from . import topics

Number = Union[int, float]


def format_number(value: Number) -> str:
    """Render a reading without a trailing ``.0`` for whole numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class WeatherReading:
    """
    One weather broadcast.

    Attributes:
        snr: Weather station serial number
        lumen: Illuminance (lx)
        temp: Temperature (°C)
        wind: Wind speed (m/s)
        rain: Rain detected
    """
    snr: str
    lumen: Number
    temp: Number
    wind: Number
    rain: bool

    def to_state_payloads(self) -> Dict[str, str]:
        """Map each sensor state topic to its payload."""
        return {
            topics.sensor_state_topic(self.snr, 'illuminance'): format_number(self.lumen),
            topics.sensor_state_topic(self.snr, 'temperature'): format_number(self.temp),
            topics.sensor_state_topic(self.snr, 'wind'): format_number(self.wind),
            topics.sensor_state_topic(self.snr, 'rain'): 'ON' if self.rain else 'OFF',
        }
