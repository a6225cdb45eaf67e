"""
Measurement data model, as sent by the field sensors.
"""

from pydantic import BaseModel, ConfigDict, Field

INT64_MIN = -2**63
INT64_MAX = 2**63 - 1


class MeasurementData(BaseModel):
    """Physical quantities of a single reading. Must be finite, no other range validation."""
    model_config = ConfigDict(strict=True, frozen=True, allow_inf_nan=False)

    temperature: float
    humidity: float
    pressure: float


class Measurement(BaseModel):
    """
    One decoded reading, keyed by the sensor that produced it.
    Instances are immutable once decoded.
    """
    model_config = ConfigDict(strict=True, frozen=True)

    sensor_id: str = Field(min_length=1)
    sensor_time: int = Field(ge=INT64_MIN, le=INT64_MAX)
    measurement_id: str
    measurement_data: MeasurementData

    @property
    def temperature(self) -> float:
        return self.measurement_data.temperature

    @property
    def humidity(self) -> float:
        return self.measurement_data.humidity

    @property
    def pressure(self) -> float:
        return self.measurement_data.pressure

    def encode(self) -> bytes:
        """Serialize back to the JSON wire format."""
        return self.model_dump_json().encode("utf-8")
