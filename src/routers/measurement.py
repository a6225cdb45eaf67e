from fastapi import APIRouter, Depends, HTTPException

from core.service_manager import BridgeService
from routers.dependencies import get_bridge
from schemas import MeasurementResponse, ReceiverStatsResponse

router = APIRouter(tags=["measurement"])


@router.get("/measurements/{sensor_id}", response_model=MeasurementResponse, responses={
    404: {"description": "No measurement was ever received for this sensor."}
})
async def get_measurement(sensor_id: str, bridge: BridgeService = Depends(get_bridge)) -> MeasurementResponse:
    """Latest raw measurement received from a sensor."""
    measurement = bridge.store.get(sensor_id)
    if measurement is None:
        raise HTTPException(status_code=404, detail=f"No measurement received from {sensor_id}")
    return MeasurementResponse.model_validate(measurement.model_dump())


@router.get("/receiver/stats", response_model=ReceiverStatsResponse)
async def get_receiver_stats(bridge: BridgeService = Depends(get_bridge)) -> ReceiverStatsResponse:
    return ReceiverStatsResponse(**bridge.receiver.stats.to_dict())
