import logging
import socket
import threading
import time
from dataclasses import dataclass, asdict
from typing import Optional, Tuple

from core.event_hub import EventHub, MEASUREMENT_UPDATE
from core.ingest_decoder import DecodeError, decode
from core.measurement_store import MeasurementStore
from core.models.config_data import DEFAULT_RECEIVER_PORT

logger = logging.getLogger(__name__)

# Datagrams longer than this are truncated by recvfrom
MAX_DATAGRAM_SIZE = 1024
# How often the loop wakes up to check for a stop request
POLL_INTERVAL = 0.5


class ReceiverBindError(RuntimeError):
    """The listening socket could not be bound. Fatal at startup."""


@dataclass
class ReceiverStats:
    datagrams_received: int = 0
    measurements_stored: int = 0
    decode_failures: int = 0
    read_errors: int = 0
    last_datagram_time: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


class Receiver:
    """
    Listens for sensor datagrams over UDP and keeps the MeasurementStore up to date.

    The transport is fire-and-forget: nothing is acknowledged or retried,
    malformed datagrams are logged and dropped.
    """

    def __init__(
        self,
        store: MeasurementStore,
        host: str = "0.0.0.0",
        port: int = DEFAULT_RECEIVER_PORT,
        event_hub: Optional[EventHub] = None,
    ):
        self.store = store
        self.host = host
        self.port = port
        self.event_hub = event_hub
        self.stats = ReceiverStats()
        self._sock: Optional[socket.socket] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """Bound (host, port), or None when not bound."""
        sock = self._sock
        if sock is None:
            return None
        try:
            return sock.getsockname()[:2]
        except OSError:
            return None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def bind(self):
        """Create and bind the listening socket."""
        if self._sock is not None:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
        except OSError as e:
            sock.close()
            raise ReceiverBindError(f"Could not bind receiver to {self.host}:{self.port}: {e}") from e
        sock.settimeout(POLL_INTERVAL)
        self._sock = sock
        logger.info(f"Receiver listening on {self.address[0]}:{self.address[1]}")

    def start(self):
        """Bind (if needed) and run the receive loop in a background thread."""
        if self.running:
            return
        self.bind()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run, args=(self._stop_event,), name="receiver", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0):
        """Stop the receive loop and release the socket."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Receiver thread did not stop in time")
            self._thread = None
        self.close()

    def close(self):
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None
            logger.info("Receiver socket closed")

    def run(self, stop_event: threading.Event):
        """
        Receive loop. Only returns once stop_event is set.

        Socket errors other than timeouts are transient: the iteration is
        skipped and the loop goes on. The socket is closed on the way out.
        """
        self.bind()
        sock = self._sock
        try:
            while not stop_event.is_set():
                try:
                    payload, address = sock.recvfrom(MAX_DATAGRAM_SIZE)
                except socket.timeout:
                    continue
                except OSError as e:
                    if stop_event.is_set():
                        break
                    self.stats.read_errors += 1
                    logger.debug(f"Receiver read error: {e}")
                    # Avoid spinning on a socket that keeps failing
                    stop_event.wait(0.01)
                    continue

                self.process(payload, address)
        finally:
            self.close()

    def process(self, payload: bytes, address=None) -> bool:
        """Decode one datagram and store it. Returns True if it was stored."""
        self.stats.datagrams_received += 1
        self.stats.last_datagram_time = time.time()
        try:
            measurement = decode(payload)
        except DecodeError as e:
            self.stats.decode_failures += 1
            logger.warning(f"Failed to process packet from {address}: {e.reason}")
            return False

        self.store.put(measurement.sensor_id, measurement)
        self.stats.measurements_stored += 1
        logger.info(
            f"{measurement.sensor_id}: Temperature <{measurement.temperature:f}> "
            f"Humidity <{measurement.humidity:f}>"
        )
        if self.event_hub is not None:
            self.event_hub.send_all_on_topic(MEASUREMENT_UPDATE, measurement)
        return True
