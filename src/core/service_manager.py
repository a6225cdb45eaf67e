# External libs
import asyncio
import logging
from typing import Optional

# Internal libs
from core.bridge_assembly import BridgeAssembly
from core.event_hub import EventHub
from core.measurement_store import MeasurementStore
from core.models.config_data import Config
from core.services.adapter_registry import AdapterRegistry
from core.services.receiver import Receiver
from core.services.sensor_adapter import PUSH_INTERVAL

logger = logging.getLogger(__name__)


class BridgeService:
    """
    Wires the receiver, the measurement store and the sensor adapters together.

    Everything is built here and handed down explicitly; there is no global
    store.
    """

    def __init__(self, config: Config, event_hub: Optional[EventHub] = None, push_interval: float = PUSH_INTERVAL):
        self.config = config
        self.event_hub = event_hub if event_hub is not None else EventHub()
        self.store = MeasurementStore()
        self.receiver = Receiver(
            self.store,
            host=config.receiver.host,
            port=config.receiver.port,
            event_hub=self.event_hub,
        )
        self.assembly = BridgeAssembly(config.bridge, event_hub=self.event_hub)
        self.registry = AdapterRegistry(
            config.bridge.sensors,
            self.store,
            on_update=self.assembly.publish,
            interval=push_interval,
        )
        self.assembly.build(self.registry)
        self.running = False

    async def start_services(self):
        """Start the receiver and the push timers. A bind failure propagates."""
        if self.running:
            return
        logger.info("Starting sensor bridge...")
        self.event_hub.init(asyncio.get_running_loop())

        self.receiver.start()
        self.registry.start_all()
        self.running = True
        logger.info(f"Sensor bridge started with {len(self.registry)} sensors")

    async def stop_services(self):
        """
        Stop the push timers first, then the receiver, then drop the event hub
        subscribers so nothing writes to a torn-down transport.
        """
        if not self.running:
            return
        self.running = False

        await self.registry.aclose_all()
        await asyncio.to_thread(self.receiver.stop)
        self.event_hub.unsubscribe_all()
        logger.info("Sensor bridge stopped")
