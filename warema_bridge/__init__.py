"""
warema_bridge - Warema WMS ↔ MQTT bridge core

This package keeps the device registry, evaluates availability, reconciles
the stick's view of the network and routes stick events to MQTT.

Architecture:
- BridgeService: Owns every component and the dispatch thread
- EventRouter: Stick events → registry / monitor / publishers
- DeviceRegistry: Sole owner of per-device state
- AvailabilityMonitor: Timeout evaluation and wake-up probing
- ReconciliationController: All-or-nothing rescan
- TaskSupervisor: Periodic tasks and one-shot follow-ups
- BridgeConfig: Configuration management

Threading Model:
- Stick driver thread (driver internal, enqueues events)
- paho-mqtt network thread (enqueues commands and BrokerConnected)
- Timer threads (enqueue TimerFired / FollowUpDue)
- Dispatch Thread (our thread, runs every handler)
"""

from warema_bridge.config import BridgeConfig, MQTTConfig, WMSConfig, ForcedDevice
from warema_bridge.registry import Device, DeviceRegistry
from warema_bridge.availability import AvailabilityMonitor
from warema_bridge.reconciliation import ReconciliationController
from warema_bridge.router import EventRouter
from warema_bridge.scheduler import TaskSupervisor
from warema_bridge.stick import StickProtocol, StickError, DriverLoadError, load_driver
from warema_bridge.service import BridgeService

__all__ = [
    "BridgeConfig",
    "MQTTConfig",
    "WMSConfig",
    "ForcedDevice",
    "Device",
    "DeviceRegistry",
    "AvailabilityMonitor",
    "ReconciliationController",
    "EventRouter",
    "TaskSupervisor",
    "StickProtocol",
    "StickError",
    "DriverLoadError",
    "load_driver",
    "BridgeService",
]
