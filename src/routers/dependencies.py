from fastapi import HTTPException, Request

from core.service_manager import BridgeService


def get_bridge(request: Request) -> BridgeService:
    bridge = getattr(request.app.state, "bridge", None)
    if bridge is None:
        raise HTTPException(status_code=503, detail="Sensor bridge is not running")
    return bridge
