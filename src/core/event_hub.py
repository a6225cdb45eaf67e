import asyncio
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Topics
MEASUREMENT_UPDATE = "measurement_update"
ACCESSORY_UPDATE = "accessory_update"


class EventHub:
    """
    Topic based publish/subscribe between the receiver thread, the adapter
    timers and the web layer.

    Handlers are always run on the bound event loop. Messages published from
    another thread (the receiver) are handed over with call_soon_threadsafe.

    The bridge only publishes here; MEASUREMENT_UPDATE and ACCESSORY_UPDATE are
    the extension points for outward transports that want every new reading or
    pushed value instead of polling the API.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def init(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop

    def subscribe(self, topic: str, handler: Callable):
        with self._lock:
            handlers = self._subscribers.setdefault(topic, [])
            if handler not in handlers:
                handlers.append(handler)
        logger.debug(f"Subscribed to {topic}")

    def unsubscribe(self, topic: str, handler: Callable):
        with self._lock:
            if handler in self._subscribers.get(topic, []):
                self._subscribers[topic].remove(handler)
                logger.debug(f"Unsubscribed from {topic}")

    def unsubscribe_all(self):
        with self._lock:
            self._subscribers.clear()

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, []))

    def send_all_on_topic(self, topic: str, message: Any):
        with self._lock:
            handlers = list(self._subscribers.get(topic, []))

        for handler in handlers:
            if self._loop is None or self._loop.is_closed():
                # No loop bound (tests, or shutdown already happened): dispatch inline
                self._call(handler, topic, message)
                continue

            try:
                current_loop = asyncio.get_running_loop()
            except RuntimeError:
                current_loop = None

            if current_loop is self._loop:
                self._call(handler, topic, message)
            else:
                try:
                    self._loop.call_soon_threadsafe(self._call, handler, topic, message)
                except RuntimeError as e:
                    logger.warning(f"Dropped message on topic {topic}: {e}")

    def _call(self, handler: Callable, topic: str, message: Any):
        try:
            if asyncio.iscoroutinefunction(handler):
                if self._loop is None:
                    logger.warning(f"EventHub loop not initialized. Cannot dispatch async handler for {topic}")
                    return
                self._loop.create_task(handler(topic, message))
            else:
                handler(topic, message)
        except Exception as e:
            logger.error(f"Error handling message on topic {topic}: {e}")
