"""
Warema CLI - Main entry point.

Provides command-line interface for sending cover commands over MQTT.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from warema_mqtt.schemas import CommandKind, SetAction, parse_angle, parse_position

from .mqtt_client import MQTTCommandClient

Command = Tuple[str, CommandKind, str]


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If YAML is invalid
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")

    if not isinstance(config, dict):
        raise ValueError(f"Scene file must contain a mapping: {config_path}")
    return config


def scene_commands(scene: Dict[str, Any]) -> List[Command]:
    """
    Expand a scene into commands.

    A scene maps serial numbers to either a position or a mapping with
    ``position`` and/or ``tilt``:

        123456: 100
        234567:
          position: 40
          tilt: -30

    Raises:
        ValueError: Out-of-range or malformed entry
    """
    commands: List[Command] = []
    for snr, target in scene.items():
        snr = str(snr)
        if isinstance(target, dict):
            if target.get('position') is not None:
                position = parse_position(target['position'])
                commands.append((snr, CommandKind.SET_POSITION, str(position)))
            if target.get('tilt') is not None:
                angle = parse_angle(target['tilt'])
                commands.append((snr, CommandKind.SET_TILT, str(angle)))
        else:
            position = parse_position(target)
            commands.append((snr, CommandKind.SET_POSITION, str(position)))
    return commands


def build_commands(args: argparse.Namespace) -> List[Command]:
    """Translate parsed arguments into (snr, kind, payload) tuples."""
    if args.command in ('open', 'close', 'stop'):
        action = SetAction(args.command.upper())
        return [(args.snr, CommandKind.SET, action.value)]

    if args.command == 'position':
        return [(args.snr, CommandKind.SET_POSITION, str(parse_position(args.value)))]

    if args.command == 'tilt':
        return [(args.snr, CommandKind.SET_TILT, str(parse_angle(args.value)))]

    if args.command == 'scene':
        return scene_commands(load_yaml_config(args.config))

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Warema CLI - Send cover commands to the Warema bridge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Open / close / stop a cover
  warema-cli open 123456
  warema-cli close 123456
  warema-cli stop 123456

  # Move to 40% closed, then set the slats
  warema-cli position 123456 40
  warema-cli tilt 123456 -30

  # Apply several targets from a YAML scene
  warema-cli scene config/scenes/evening.yaml
"""
    )

    # Global arguments
    parser.add_argument(
        "--broker",
        default="localhost",
        help="MQTT broker host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=1883,
        help="MQTT broker port (default: 1883)"
    )
    parser.add_argument(
        "--user",
        default=os.environ.get("MQTT_USER"),
        help="MQTT username (default: $MQTT_USER)"
    )
    parser.add_argument(
        "--password",
        default=os.environ.get("MQTT_PASSWORD"),
        help="MQTT password (default: $MQTT_PASSWORD)"
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    for name, text in (('open', 'Open cover'), ('close', 'Close cover'), ('stop', 'Stop cover')):
        sub = subparsers.add_parser(name, help=text)
        sub.add_argument('snr', help='Device serial number')

    position = subparsers.add_parser('position', help='Move cover to position (0 open .. 100 closed)')
    position.add_argument('snr', help='Device serial number')
    position.add_argument('value', type=int, help='Target position')

    tilt = subparsers.add_parser('tilt', help='Set slat angle')
    tilt.add_argument('snr', help='Device serial number')
    tilt.add_argument('value', type=int, help='Target angle')

    scene = subparsers.add_parser('scene', help='Apply positions from YAML scene')
    scene.add_argument('config', help='Path to scene YAML')

    return parser


def main():
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        commands = build_commands(args)
        client = MQTTCommandClient(
            broker=args.broker,
            port=args.port,
            username=args.user,
            password=args.password,
        )
        for snr, kind, payload in commands:
            client.send_command(snr, kind, payload)

    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
