import threading
from typing import Dict, List, Optional

from core.models.measurement import Measurement


class MeasurementStore:
    """
    Latest known Measurement per sensor id.

    Written by the receiver thread and read by every sensor adapter, so all
    access goes through a lock. Measurements are immutable, a reader always
    gets either the previous record or the new one.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._latest: Dict[str, Measurement] = {}

    def put(self, sensor_id: str, measurement: Measurement) -> None:
        """Store a measurement, replacing whatever was there for this sensor."""
        with self._lock:
            self._latest[sensor_id] = measurement

    def get(self, sensor_id: str) -> Optional[Measurement]:
        with self._lock:
            return self._latest.get(sensor_id)

    def snapshot(self) -> Dict[str, Measurement]:
        """Consistent copy of the whole store."""
        with self._lock:
            return dict(self._latest)

    def sensor_ids(self) -> List[str]:
        with self._lock:
            return list(self._latest.keys())

    def __contains__(self, sensor_id: object) -> bool:
        with self._lock:
            return sensor_id in self._latest

    def __len__(self) -> int:
        with self._lock:
            return len(self._latest)
