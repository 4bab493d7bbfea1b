"""
Warema CLI - Command-line interface for driving covers through the bridge.

This package publishes the same command payloads Home Assistant sends, so a
cover can be moved without a Home Assistant instance.

Usage:
    warema-cli open 123456
    warema-cli position 123456 40
    warema-cli tilt 123456 -30
    warema-cli scene config/scenes/evening.yaml
"""

__version__ = "1.0.0"
