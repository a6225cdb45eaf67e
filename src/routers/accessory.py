from fastapi import APIRouter, Depends, HTTPException

from core.service_manager import BridgeService
from core.services.sensor_adapter import SensorAdapter
from routers.dependencies import get_bridge
from schemas import AccessoryList, AccessoryState, BridgeInfo, PushedValue, TemperatureValue

router = APIRouter(tags=["accessory"])

NOT_FOUND = {404: {"description": "No sensor with this serial is configured."}}


def _get_adapter(bridge: BridgeService, serial: str) -> SensorAdapter:
    adapter = bridge.registry.get(serial)
    if adapter is None:
        raise HTTPException(status_code=404, detail=f"Unknown sensor serial: {serial}")
    return adapter


def _pull_state(bridge: BridgeService, adapter: SensorAdapter) -> AccessoryState:
    status = adapter.resolve()
    info = bridge.assembly.get_accessory(adapter.serial)
    return AccessoryState(
        aid=info.aid,
        serial=adapter.serial,
        name=adapter.name,
        manufacturer=info.manufacturer,
        model=adapter.model,
        value=status.value,
        active=status.active,
        fault=status.fault.value,
    )


@router.get("/bridge", response_model=BridgeInfo)
async def get_bridge_info(bridge: BridgeService = Depends(get_bridge)) -> BridgeInfo:
    """Bridge identity. Pairing metadata is not exposed."""
    info = bridge.assembly.bridge_info
    return BridgeInfo(
        aid=info.aid,
        name=info.name,
        manufacturer=info.manufacturer,
        model=info.model,
        accessories=len(bridge.registry),
    )


@router.get("/accessories", response_model=AccessoryList)
async def list_accessories(bridge: BridgeService = Depends(get_bridge)) -> AccessoryList:
    return AccessoryList(list=[_pull_state(bridge, adapter) for adapter in bridge.registry])


@router.get("/accessories/{serial}", response_model=AccessoryState, responses=NOT_FOUND)
async def get_accessory(serial: str, bridge: BridgeService = Depends(get_bridge)) -> AccessoryState:
    """Current state of one sensor accessory, resolved at request time."""
    return _pull_state(bridge, _get_adapter(bridge, serial))


@router.get("/accessories/{serial}/temperature", response_model=TemperatureValue, responses=NOT_FOUND)
async def get_temperature(serial: str, bridge: BridgeService = Depends(get_bridge)) -> TemperatureValue:
    adapter = _get_adapter(bridge, serial)
    return TemperatureValue(serial=serial, value=adapter.pull())


@router.get("/accessories/{serial}/pushed", response_model=PushedValue, responses=NOT_FOUND)
async def get_pushed(serial: str, bridge: BridgeService = Depends(get_bridge)) -> PushedValue:
    """Last value sent on the update channel, empty until the first push."""
    adapter = _get_adapter(bridge, serial)
    status = bridge.assembly.last_pushed(adapter.serial)
    if status is None:
        return PushedValue(serial=serial)
    return PushedValue(serial=serial, value=status.value, active=status.active, fault=status.fault.value)
