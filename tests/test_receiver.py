"""
Tests for the UDP receiver: decoding, storing, resilience and shutdown.
"""
import json
import socket
import time
import threading

import pytest

from conftest import make_measurement, wait_for
from core.event_hub import EventHub, MEASUREMENT_UPDATE
from core.measurement_store import MeasurementStore
from core.services.receiver import MAX_DATAGRAM_SIZE, Receiver, ReceiverBindError


@pytest.fixture
def store():
    return MeasurementStore()


@pytest.fixture
def receiver(store):
    rx = Receiver(store, host="127.0.0.1", port=0)
    yield rx
    rx.stop()


class TestProcess:
    """Processing single datagrams without a socket."""

    def test_valid_payload_is_stored(self, store, payload):
        rx = Receiver(store)
        assert rx.process(payload) is True
        assert store.get("S1").temperature == 21.5
        assert rx.stats.measurements_stored == 1
        assert rx.stats.datagrams_received == 1

    def test_invalid_payload_is_dropped(self, store):
        rx = Receiver(store)
        assert rx.process(b"garbage", ("127.0.0.1", 5000)) is False
        assert len(store) == 0
        assert rx.stats.decode_failures == 1

    def test_failure_is_logged(self, store, caplog):
        rx = Receiver(store)
        with caplog.at_level("WARNING"):
            rx.process(b"{}", ("127.0.0.1", 5000))
        assert "Failed to process packet" in caplog.text

    def test_success_is_logged(self, store, payload, caplog):
        rx = Receiver(store)
        with caplog.at_level("INFO"):
            rx.process(payload)
        assert "S1: Temperature <21.500000> Humidity <45.250000>" in caplog.text

    def test_publishes_on_event_hub(self, store, payload):
        hub = EventHub()
        received = []
        hub.subscribe(MEASUREMENT_UPDATE, lambda topic, message: received.append(message))
        rx = Receiver(store, event_hub=hub)
        rx.process(payload)
        assert len(received) == 1
        assert received[0].sensor_id == "S1"


class TestReceiverSocket:
    """Receiving over a real UDP socket."""

    def test_bind_ephemeral_port(self, receiver):
        receiver.bind()
        host, port = receiver.address
        assert host == "127.0.0.1"
        assert port > 0

    def test_bind_failure(self, store, occupied_port):
        rx = Receiver(store, host="127.0.0.1", port=occupied_port)
        with pytest.raises(ReceiverBindError):
            rx.bind()
        assert rx.address is None

    def test_receive_and_store(self, receiver, store, sender):
        receiver.start()
        sender.sendto(make_measurement("S1", temperature=19.0).encode(), receiver.address)
        assert wait_for(lambda: store.get("S1") is not None)
        assert store.get("S1").temperature == 19.0

    def test_latest_datagram_wins(self, receiver, store, sender):
        receiver.start()
        sender.sendto(make_measurement("S1", temperature=1.0, measurement_id="a").encode(), receiver.address)
        assert wait_for(lambda: store.get("S1") is not None)
        sender.sendto(make_measurement("S1", temperature=2.0, measurement_id="b").encode(), receiver.address)
        assert wait_for(lambda: store.get("S1").measurement_id == "b")
        assert store.get("S1").temperature == 2.0

    def test_malformed_datagrams_do_not_stop_the_loop(self, receiver, store, sender):
        receiver.start()
        for garbage in (b"", b"\xff\xfe", b"{", b"[]", b'{"sensor_id": 1}'):
            sender.sendto(garbage, receiver.address)
        sender.sendto(make_measurement("S2").encode(), receiver.address)

        assert wait_for(lambda: store.get("S2") is not None)
        assert receiver.running
        assert receiver.stats.decode_failures == 5
        assert len(store) == 1

    def test_oversized_datagram_is_truncated(self, receiver, store, sender, payload_dict):
        """Only the first MAX_DATAGRAM_SIZE bytes are read, so the record is rejected."""
        payload_dict["measurement_id"] = "x" * (MAX_DATAGRAM_SIZE * 2)
        receiver.start()
        sender.sendto(json.dumps(payload_dict).encode(), receiver.address)
        assert wait_for(lambda: receiver.stats.datagrams_received == 1)
        assert wait_for(lambda: receiver.stats.decode_failures == 1)
        assert store.get("S1") is None

    def test_stop_closes_socket(self, receiver):
        receiver.start()
        assert receiver.running
        receiver.stop()
        assert not receiver.running
        assert receiver.address is None

    def test_stop_is_idempotent(self, receiver):
        receiver.start()
        receiver.stop()
        receiver.stop()
        assert not receiver.running

    def test_run_returns_on_stop_event(self, store):
        """The blocking loop exits and releases the socket once signalled."""
        rx = Receiver(store, host="127.0.0.1", port=0)
        stop_event = threading.Event()
        thread = threading.Thread(target=rx.run, args=(stop_event,))
        thread.start()
        assert wait_for(lambda: rx.address is not None)
        stop_event.set()
        thread.join(timeout=5)
        assert not thread.is_alive()
        assert rx.address is None


class FlakySocket:
    """Socket stand-in: one read error, then the queued datagrams, then timeouts."""

    def __init__(self, datagrams):
        self.reads = [OSError("connection refused")] + [(d, ("127.0.0.1", 5000)) for d in datagrams]
        self.closed = False

    def recvfrom(self, size):
        if self.reads:
            item = self.reads.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        time.sleep(0.01)
        raise socket.timeout()

    def getsockname(self):
        return ("127.0.0.1", 5000)

    def close(self):
        self.closed = True


class TestTransientReadErrors:

    def test_read_error_does_not_stop_the_loop(self, store):
        """A failing read is counted and the next datagram is still processed."""
        rx = Receiver(store, host="127.0.0.1", port=0)
        flaky = FlakySocket([make_measurement("S1", temperature=12.5).encode()])
        rx._sock = flaky
        stop_event = threading.Event()
        thread = threading.Thread(target=rx.run, args=(stop_event,))
        thread.start()
        try:
            assert wait_for(lambda: store.get("S1") is not None)
            assert rx.stats.read_errors == 1
            assert rx.stats.measurements_stored == 1
            assert store.get("S1").temperature == 12.5
            assert thread.is_alive()
        finally:
            stop_event.set()
            thread.join(timeout=5)
        assert not thread.is_alive()
        assert flaky.closed
