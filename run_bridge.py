#!/usr/bin/env python3
"""
Warema Bridge - Entry Point
===========================

This script starts the Warema WMS ↔ MQTT bridge, which:
- Drives a WMS USB stick through a pluggable driver (WMS_DRIVER)
- Registers scanned blinds and weather stations
- Publishes Home Assistant discovery, position, tilt and state
- Tracks device availability, wakes up and re-scans silent devices
- Executes cover commands received over MQTT

Usage:
    uv run python run_bridge.py
    uv run python run_bridge.py --config config/warema_bridge/bridge_config.yaml

Configuration:
    Environment variables (MQTT_SERVER, WMS_PAN_ID, ...) always win over the
    optional YAML file. With WMS_PAN_ID=FFFF the stick runs in network
    discovery mode and MQTT is not connected.

Lifecycle:
    1. Load configuration (YAML + environment)
    2. Setup logging (console + file)
    3. Load the stick driver
    4. Create MQTT connection and BridgeService
    5. Start service (non-blocking)
    6. Wait for stop signal (Ctrl+C or SIGTERM)
    7. Graceful shutdown

Signals:
    - SIGTERM: Graceful shutdown
    - SIGINT (Ctrl+C): Graceful shutdown

Logs:
    - Console: LOG_LEVEL (default info)
    - File: logs/bridge.log
"""

import argparse
import signal
import sys
import logging
from pathlib import Path
from typing import Optional

from warema_bridge import BridgeService, DriverLoadError, load_driver
from warema_bridge.config import BridgeConfig, LOG_LEVELS
from warema_mqtt import MQTTConnection, create_logger


# ─────────────────────────────────────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────────────────────────────────────

def setup_logging(log_file: Optional[Path] = None, level: str = 'info') -> logging.Logger:
    """
    Setup logging for the bridge.

    Args:
        log_file: Optional path to log file
        level: Root log level name (debug, info, warn, error)

    Returns:
        Logger instance for the bridge
    """
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=LOG_LEVELS.get(level.lower(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            *(
                [logging.FileHandler(log_file)]
                if log_file
                else []
            )
        ]
    )

    logger = logging.getLogger(__name__)
    return logger


# ─────────────────────────────────────────────────────────────────────────────
# Main Service
# ─────────────────────────────────────────────────────────────────────────────

class BridgeApp:
    """
    Main application wrapper for BridgeService.

    Handles:
    - Configuration loading
    - Component initialization (driver, MQTT connection)
    - Signal handling (SIGTERM, SIGINT)
    - Graceful shutdown
    """

    def __init__(self, config_path: Optional[Path] = None, log_file: Optional[Path] = None):
        self.config_path = config_path
        self.log_file = log_file

        if config_path:
            self.config = BridgeConfig.from_yaml(config_path)
        else:
            self.config = BridgeConfig.from_env()
        self.logger = setup_logging(log_file, self.config.log_level)

        # Components (initialized in setup())
        self.connection: Optional[MQTTConnection] = None
        self.service: Optional[BridgeService] = None

        self._shutdown_requested = False

    def setup(self):
        """
        Setup all components.

        Steps:
        1. Load the stick driver class
        2. Create the MQTT connection (skipped in network discovery mode)
        3. Create BridgeService
        """
        self.logger.info("=" * 80)
        self.logger.info("🚀 Warema Bridge - Starting")
        self.logger.info("=" * 80)

        wms = self.config.wms_config
        self.logger.info(
            f"📄 Configuration: channel={wms.channel}, pan_id={wms.pan_id}, "
            f"serial_port={wms.serial_port}, broker={self.config.mqtt_config.broker}"
        )

        # 1. Driver
        if not wms.driver:
            raise DriverLoadError("WMS_DRIVER is not set (expected 'module:Class')")
        self.logger.info(f"🔌 Loading stick driver: {wms.driver}")
        driver_cls = load_driver(wms.driver)

        # 2. MQTT connection
        if wms.discovery_mode:
            self.logger.info("🔍 PAN id FFFF: network discovery mode, MQTT disabled")
        else:
            mqtt_config = self.config.mqtt_config
            self.connection = MQTTConnection(
                broker_host=mqtt_config.broker,
                broker_port=mqtt_config.port,
                client_id=mqtt_config.client_id,
                logger=create_logger(component="connection", level=self.config.logging_level),
                username=mqtt_config.username,
                password=mqtt_config.password,
                qos=mqtt_config.qos,
            )
            self.logger.info("✅ MQTT connection created")

        # 3. Service
        self.service = BridgeService(
            config=self.config,
            connection=self.connection,
            stick_factory=lambda callback: driver_cls(
                wms.serial_port,
                wms.channel,
                wms.pan_id,
                wms.key,
                callback,
            ),
        )
        self.logger.info("✅ Service created")
        self.logger.info("=" * 80)

    def run(self):
        """
        Run the bridge.

        Blocks until shutdown is requested (via signal or exception).
        """
        if not self.service:
            raise RuntimeError("Service not initialized. Call setup() first.")

        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        try:
            self.service.start()

            self.logger.info("✅ Bridge started successfully")
            self.logger.info("Press Ctrl+C to stop")
            self.logger.info("=" * 80)

            self.service.wait()

        except KeyboardInterrupt:
            self.logger.info("\n⚠️  KeyboardInterrupt received")
            self.shutdown()

        except Exception as e:
            self.logger.error(f"❌ Bridge error: {e}", exc_info=True)
            self.shutdown()
            sys.exit(1)

    def shutdown(self):
        """Graceful shutdown: timers, dispatch thread, stick, MQTT."""
        if self._shutdown_requested:
            self.logger.warning("⚠️  Shutdown already in progress")
            return

        self._shutdown_requested = True

        self.logger.info("=" * 80)
        self.logger.info("🛑 Shutting down bridge")
        self.logger.info("=" * 80)

        if self.service:
            try:
                self.service.stop()
                self.logger.info("✅ Service stopped")
            except Exception as e:
                self.logger.error(f"❌ Error stopping service: {e}")

        self.logger.info("✅ Shutdown complete")

    def _signal_handler(self, signum, frame):
        signal_name = signal.Signals(signum).name
        self.logger.info(f"\n⚠️  Received signal {signal_name} ({signum})")
        self.shutdown()
        sys.exit(0)


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def parse_args():
    parser = argparse.ArgumentParser(
        description="Warema Bridge - WMS stick ↔ MQTT / Home Assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Configure through environment variables only
  WMS_PAN_ID=1A2B WMS_DRIVER=wms_stick.driver:WmsStick uv run python run_bridge.py

  # Layer environment variables over a YAML file
  uv run python run_bridge.py --config config/warema_bridge/bridge_config.yaml

  # Console logging only
  uv run python run_bridge.py --no-log-file
        """
    )

    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Optional YAML configuration file (environment variables override it)'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        default=Path('logs/bridge.log'),
        help='Path to log file (default: logs/bridge.log)'
    )

    parser.add_argument(
        '--no-log-file',
        action='store_true',
        help='Disable file logging (console only)'
    )

    return parser.parse_args()


def main():
    args = parse_args()

    log_file = None if args.no_log_file else args.log_file

    if args.config and not args.config.exists():
        print(f"❌ Error: Configuration file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    try:
        app = BridgeApp(config_path=args.config, log_file=log_file)
        app.setup()
        app.run()
    except Exception as e:
        print(f"❌ Fatal error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
