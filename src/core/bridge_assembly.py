"""
Accessory objects exposed to the home-automation controller.

The bridge itself is accessory 1, sensors follow from 2 in configuration order.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from core.event_hub import ACCESSORY_UPDATE, EventHub
from core.models.accessory_status import AccessoryStatus
from core.models.config_data import BridgeConfig
from core.services.adapter_registry import AdapterRegistry
from core.services.sensor_adapter import SensorAdapter

logger = logging.getLogger(__name__)

BRIDGE_ACCESSORY_ID = 1


@dataclass(frozen=True)
class AccessoryInfo:
    aid: int
    name: str
    manufacturer: str
    model: str
    serial_number: str


class BridgeAssembly:
    """Builds accessory descriptors and keeps the values pushed by the adapters."""

    def __init__(self, config: BridgeConfig, event_hub: Optional[EventHub] = None):
        self.config = config
        self.event_hub = event_hub
        self.bridge_info = AccessoryInfo(
            aid=BRIDGE_ACCESSORY_ID,
            name=config.name,
            manufacturer=config.manufacturer,
            model=config.model,
            serial_number="",
        )
        self._accessories: Dict[str, AccessoryInfo] = {}
        self._pushed: Dict[str, AccessoryStatus] = {}
        self._lock = threading.Lock()

    def build(self, registry: AdapterRegistry) -> List[AccessoryInfo]:
        """Create one accessory per adapter."""
        self._accessories = {}
        for index, adapter in enumerate(registry):
            self._accessories[adapter.serial] = AccessoryInfo(
                aid=BRIDGE_ACCESSORY_ID + 1 + index,
                name=adapter.name,
                manufacturer=self.config.manufacturer,
                model=adapter.model,
                serial_number=adapter.serial,
            )
        return self.accessories()

    def accessories(self) -> List[AccessoryInfo]:
        return list(self._accessories.values())

    def get_accessory(self, serial: str) -> Optional[AccessoryInfo]:
        return self._accessories.get(serial)

    def publish(self, adapter: SensorAdapter, status: AccessoryStatus):
        """Update channel used by the adapters' push timers."""
        with self._lock:
            self._pushed[adapter.serial] = status
        logger.debug(f"Pushed value {status.value} for {adapter.serial} (active: {status.active})")
        if self.event_hub is not None:
            self.event_hub.send_all_on_topic(ACCESSORY_UPDATE, (adapter.serial, status))

    def last_pushed(self, serial: str) -> Optional[AccessoryStatus]:
        with self._lock:
            return self._pushed.get(serial)
