"""
warema_control - Command side of the bridge

Bounded Context: Home Assistant cover commands
Responsibilities:
  - Command registration and validation (CommandRegistry)
  - Command execution against the stick (CommandPlane)

Architecture:
  - CommandRegistry: Explicit registration pattern, one handler per topic
  - CommandPlane: set / set_position / set_tilt handlers

Design Philosophy:
  - Explicit registration (fail-fast, no runtime surprises)
  - Clear error messages (lists available commands on error)
"""

from .registry import CommandRegistry, CommandNotAvailableError
from .plane import CommandPlane

__all__ = [
    "CommandRegistry",
    "CommandNotAvailableError",
    "CommandPlane",
]
