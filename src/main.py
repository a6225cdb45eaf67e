from fastapi import FastAPI
from pydantic_settings import BaseSettings, SettingsConfigDict
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Optional
import logging

from routers.api import router as api_router
from schemas import AppHealthOK
from core.config_loader import ConfigLoader
from core.service_manager import BridgeService

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SENSOR_BRIDGE_")

    app_name: str = "Sensor Bridge"
    debug: bool = False
    # Defaults to config/sensor-bridge.json in the project root
    config_path: Optional[str] = None
    # Overrides receiver.port from the config file when set
    receiver_port: Optional[int] = None
    api_host: str = "0.0.0.0"
    api_port: int = 8000


settings = Settings()


def build_bridge(settings: Settings) -> BridgeService:
    """Load the configuration file and build the bridge service from it."""
    config = ConfigLoader(settings.config_path).config
    if settings.receiver_port is not None:
        config = replace(config, receiver=replace(config.receiver, port=settings.receiver_port))
    return BridgeService(config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the bridge with the app and stop it on shutdown."""
    logger.info("Starting sensor bridge")
    try:
        bridge = build_bridge(settings)
        await bridge.start_services()
    except Exception as e:
        logger.error(f"Failed to start sensor bridge: {e}")
        raise

    app.state.bridge = bridge
    try:
        yield
    finally:
        logger.info("Stopping sensor bridge")
        await bridge.stop_services()
        app.state.bridge = None


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)


@app.get("/", tags=["meta"])
async def read_root() -> dict[str, str]:
    return {"message": settings.app_name}


@app.get("/health", tags=["meta"], response_model=AppHealthOK)
async def healthcheck() -> AppHealthOK:
    return AppHealthOK(status="ok", app=settings.app_name)


# mount API router under /api
app.include_router(api_router, prefix="/api")
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def run():
    """Console entry point."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
