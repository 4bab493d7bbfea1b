"""
Inbound Command Schema
======================

Bounded Context: Command Requests from Home Assistant

Home Assistant drives a cover by publishing to one of three topics:

    warema/<snr>/set           OPEN | CLOSE | STOP | ON | OFF
    warema/<snr>/set_position  0..100
    warema/<snr>/set_tilt      signed angle

CommandRequest is the parsed, typed form of one such message. The serial
number is passed through untouched; the stick decides whether it exists.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .device import parse_angle, parse_position
from . import topics


class CommandKind(str, Enum):
    """Command topic suffixes."""

    SET = "set"
    SET_POSITION = "set_position"
    SET_TILT = "set_tilt"


class SetAction(str, Enum):
    """Payloads accepted on ``warema/<snr>/set``."""

    OPEN = "OPEN"
    CLOSE = "CLOSE"
    STOP = "STOP"
    ON = "ON"
    OFF = "OFF"


class CommandParseError(ValueError):
    """Raised when a command topic carries a payload that cannot be used."""
    pass


@dataclass(frozen=True)
class CommandRequest:
    """
    Typed inbound command.

    Attributes:
        snr: Target device serial number (not validated)
        kind: Which command topic the message arrived on
        action: For ``set``, the requested action
        value: For ``set_position`` / ``set_tilt``, the bounded integer

    Example:
        >>> CommandRequest.from_mqtt("warema/123456/set_position", b"40")
        CommandRequest(snr='123456', kind=<CommandKind.SET_POSITION: 'set_position'>, action=None, value=40)
    """
    snr: str
    kind: CommandKind
    action: Optional[SetAction] = None
    value: Optional[int] = None

    @classmethod
    def from_mqtt(cls, topic: str, payload: bytes) -> 'CommandRequest':
        """
        Parse a message received on a command topic.

        Raises:
            CommandParseError: Topic is not a command topic, or the payload is
                not valid for it
        """
        parts = topic.split('/')
        if len(parts) != 3 or parts[0] != topics.BASE_TOPIC:
            raise CommandParseError(f"Not a command topic: {topic}")

        _, snr, suffix = parts
        try:
            kind = CommandKind(suffix)
        except ValueError:
            raise CommandParseError(f"Unrecognised command '{suffix}' on {topic}")

        text = payload.decode('utf-8', errors='replace').strip()

        try:
            if kind == CommandKind.SET:
                return cls(snr=snr, kind=kind, action=SetAction(text.upper()))
            if kind == CommandKind.SET_POSITION:
                return cls(snr=snr, kind=kind, value=parse_position(text))
            return cls(snr=snr, kind=kind, value=parse_angle(text))
        except ValueError as e:
            raise CommandParseError(f"Invalid payload {text!r} for {topic}: {e}")
