from dataclasses import dataclass, field
from typing import List

DEFAULT_RECEIVER_PORT = 3232


@dataclass(frozen=True)
class SensorConfig:
    serial: str
    name: str = "Unnamed Sensor"
    model: str = ""


@dataclass(frozen=True)
class BridgeConfig:
    name: str = "Sensor Bridge"
    manufacturer: str = ""
    model: str = ""
    pin: str = ""
    address: str = ""
    sensors: List[SensorConfig] = field(default_factory=list)


@dataclass(frozen=True)
class ReceiverConfig:
    port: int = DEFAULT_RECEIVER_PORT
    host: str = "0.0.0.0"


@dataclass(frozen=True)
class Config:
    receiver: ReceiverConfig = field(default_factory=ReceiverConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
