import logging
from typing import Dict, Iterable, Iterator, List, Optional

from core.measurement_store import MeasurementStore
from core.models.config_data import SensorConfig
from core.services.sensor_adapter import PUSH_INTERVAL, SensorAdapter, UpdateCallback

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Owns one SensorAdapter per configured sensor and their push timers."""

    def __init__(
        self,
        sensors: Iterable[SensorConfig],
        store: MeasurementStore,
        on_update: Optional[UpdateCallback] = None,
        interval: float = PUSH_INTERVAL,
    ):
        self._adapters: Dict[str, SensorAdapter] = {}
        for sensor_config in sensors:
            if sensor_config.serial in self._adapters:
                raise ValueError(f"Duplicate sensor serial: {sensor_config.serial}")
            self._adapters[sensor_config.serial] = SensorAdapter(
                sensor_config, store, on_update=on_update, interval=interval
            )

    def get(self, serial: str) -> Optional[SensorAdapter]:
        return self._adapters.get(serial)

    def serials(self) -> List[str]:
        return list(self._adapters.keys())

    def __iter__(self) -> Iterator[SensorAdapter]:
        return iter(list(self._adapters.values()))

    def __len__(self) -> int:
        return len(self._adapters)

    def start_all(self):
        for adapter in self:
            adapter.start()
        logger.info(f"Started {len(self)} sensor push timers")

    def stop_all(self):
        for adapter in self:
            adapter.stop()

    async def aclose_all(self):
        """Stop every push timer and wait for them to exit."""
        for adapter in self:
            await adapter.aclose()
        logger.info("All sensor push timers stopped")
