from typing import List, Optional
from pydantic import BaseModel


class AppHealthOK(BaseModel):
    status: str
    app: str


class BridgeInfo(BaseModel):
    aid: int
    name: str
    manufacturer: str
    model: str
    accessories: int


class AccessoryState(BaseModel):
    aid: int
    serial: str
    name: str
    manufacturer: str
    model: str
    value: float
    active: bool
    fault: int


class AccessoryList(BaseModel):
    list: List[AccessoryState]


class TemperatureValue(BaseModel):
    serial: str
    value: float


class PushedValue(BaseModel):
    serial: str
    value: Optional[float] = None
    active: Optional[bool] = None
    fault: Optional[int] = None


class MeasurementValues(BaseModel):
    temperature: float
    humidity: float
    pressure: float


class MeasurementResponse(BaseModel):
    sensor_id: str
    sensor_time: int
    measurement_id: str
    measurement_data: MeasurementValues


class ReceiverStatsResponse(BaseModel):
    datagrams_received: int
    measurements_stored: int
    decode_failures: int
    read_errors: int
    last_datagram_time: Optional[float] = None
