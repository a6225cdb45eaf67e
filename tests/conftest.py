"""Pytest configuration and fixtures for test suite."""

import json
import socket
import time

import pytest

from core.models.config_data import BridgeConfig, Config, ReceiverConfig, SensorConfig
from core.models.measurement import Measurement, MeasurementData
from core.service_manager import BridgeService


def make_measurement(sensor_id: str = "S1", temperature: float = 21.5, humidity: float = 45.0,
                     pressure: float = 1013.25, sensor_time: int = 1700000000,
                     measurement_id: str = "m-1") -> Measurement:
    return Measurement(
        sensor_id=sensor_id,
        sensor_time=sensor_time,
        measurement_id=measurement_id,
        measurement_data=MeasurementData(temperature=temperature, humidity=humidity, pressure=pressure),
    )


def wait_for(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
    """Poll predicate until it returns True or the timeout expires."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def payload_dict() -> dict:
    return {
        "sensor_id": "S1",
        "sensor_time": 1700000000,
        "measurement_id": "abc-123",
        "measurement_data": {
            "temperature": 21.5,
            "humidity": 45.25,
            "pressure": 1013.5,
        },
    }


@pytest.fixture
def payload(payload_dict) -> bytes:
    return json.dumps(payload_dict).encode("utf-8")


@pytest.fixture
def sensor_configs() -> list[SensorConfig]:
    return [
        SensorConfig(serial="S1", name="Living Room", model="BME280"),
        SensorConfig(serial="S2", name="Bedroom", model="BME280"),
    ]


@pytest.fixture
def config(sensor_configs) -> Config:
    """Configuration listening on an ephemeral localhost port."""
    return Config(
        receiver=ReceiverConfig(port=0, host="127.0.0.1"),
        bridge=BridgeConfig(
            name="Test Bridge",
            manufacturer="Test Manufacturer",
            model="Test Model",
            pin="00102003",
            sensors=sensor_configs,
        ),
    )


@pytest.fixture
def bridge(config) -> BridgeService:
    """Bridge service built but not started."""
    return BridgeService(config)


@pytest.fixture
def occupied_port():
    """A UDP port already bound by another socket (without SO_REUSEADDR)."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    yield sock.getsockname()[1]
    sock.close()


@pytest.fixture
def sender():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    yield sock
    sock.close()
