import asyncio
import logging
from typing import Callable, Optional

from core.measurement_store import MeasurementStore
from core.models.accessory_status import AccessoryStatus, StatusFault
from core.models.config_data import SensorConfig

logger = logging.getLogger(__name__)

# Seconds between two unsolicited value updates
PUSH_INTERVAL = 60.0
DEFAULT_VALUE = 0.0

UpdateCallback = Callable[["SensorAdapter", AccessoryStatus], None]


class SensorAdapter:
    """
    Exposes one configured sensor to the accessory protocol.

    The current value can be pulled on demand (protocol poll) and is also
    pushed on a fixed interval through on_update. Both go through resolve(),
    a plain read of the shared MeasurementStore.
    """

    def __init__(
        self,
        config: SensorConfig,
        store: MeasurementStore,
        on_update: Optional[UpdateCallback] = None,
        interval: float = PUSH_INTERVAL,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.config = config
        self.store = store
        self.on_update = on_update
        self.interval = interval
        self.status = AccessoryStatus(value=DEFAULT_VALUE, active=False)
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def serial(self) -> str:
        return self.config.serial

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def model(self) -> str:
        return self.config.model

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def resolve(self) -> AccessoryStatus:
        """
        Current status of the sensor.

        A sensor that never reported is inactive with the default value. Fault
        is always cleared: missing data is not a fault.
        """
        logger.debug(f"fetch temperature for {self.serial}")
        measurement = self.store.get(self.serial)
        if measurement is not None:
            status = AccessoryStatus(value=measurement.temperature, active=True, fault=StatusFault.NO_FAULT)
        else:
            status = AccessoryStatus(value=DEFAULT_VALUE, active=False, fault=StatusFault.NO_FAULT)
        self.status = status
        return status

    def pull(self) -> float:
        """Value getter called by the accessory protocol on a poll."""
        return self.resolve().value

    def push(self) -> AccessoryStatus:
        """Resolve and hand the status to the update channel."""
        status = self.resolve()
        if self.on_update is not None:
            try:
                self.on_update(self, status)
            except Exception as e:
                logger.error(f"Update callback failed for {self.serial}: {e}")
        return status

    def start(self):
        """Start the periodic push task on the running event loop."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        self._task = loop.create_task(self._push_loop(self._stop_event), name=f"push-{self.serial}")
        logger.debug(f"Push timer started for {self.serial} (every {self.interval}s)")

    def stop(self):
        """Signal the push task to stop. No update is pushed after this returns."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            self._task.cancel()
            logger.debug(f"Push timer stopped for {self.serial}")

    async def aclose(self):
        """Stop the push task and wait until it has exited."""
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._stop_event = None

    async def _push_loop(self, stop_event: asyncio.Event):
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                if not stop_event.is_set():
                    self.push()
