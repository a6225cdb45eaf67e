import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.models.config_data import (
    DEFAULT_RECEIVER_PORT,
    BridgeConfig,
    Config,
    ReceiverConfig,
    SensorConfig,
)

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration file missing or invalid."""


class ConfigLoader:
    """Loads the bridge configuration from its JSON file, once, at startup."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else self.get_default_path()
        self._config: Optional[Config] = None

    @staticmethod
    def get_default_path() -> Path:
        """Path of config/sensor-bridge.json in the project root."""
        return Path(__file__).parent.parent.parent / "config" / "sensor-bridge.json"

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> Config:
        """Read and parse the configuration file."""
        if not self.path.exists():
            raise ConfigError(f"Configuration file not found: {self.path}")

        try:
            with open(self.path, "r") as f:
                json_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not parse config file {self.path}: {e}") from e

        config = self.parse(json_data)
        logger.info(f"Loaded configuration from {self.path} ({len(config.bridge.sensors)} sensors)")
        return config

    @staticmethod
    def parse(json_data: Dict[str, Any]) -> Config:
        if not isinstance(json_data, dict):
            raise ConfigError("Configuration root must be an object")

        receiver_cfg = json_data.get("receiver", {}) or {}
        bridge_cfg = json_data.get("bridge", {}) or {}
        if not isinstance(receiver_cfg, dict):
            raise ConfigError("'receiver' must be an object")
        if not isinstance(bridge_cfg, dict):
            raise ConfigError("'bridge' must be an object")
        if not isinstance(bridge_cfg.get("sensors", []) or [], list):
            raise ConfigError("'bridge.sensors' must be a list")

        port = receiver_cfg.get("port", DEFAULT_RECEIVER_PORT)
        if not isinstance(port, int) or isinstance(port, bool) or not 0 <= port <= 65535:
            raise ConfigError(f"Invalid receiver port: {port!r}")

        sensors = []
        for index, sensor_cfg in enumerate(bridge_cfg.get("sensors", []) or []):
            serial = sensor_cfg.get("serial", "") if isinstance(sensor_cfg, dict) else ""
            if not serial:
                raise ConfigError(f"Sensor #{index} has no serial")
            sensors.append(SensorConfig(
                serial=serial,
                name=sensor_cfg.get("name", serial),
                model=sensor_cfg.get("model", ""),
            ))

        return Config(
            receiver=ReceiverConfig(port=port, host=receiver_cfg.get("host", "0.0.0.0")),
            bridge=BridgeConfig(
                name=bridge_cfg.get("name", "Sensor Bridge"),
                manufacturer=bridge_cfg.get("manufacturer", ""),
                model=bridge_cfg.get("model", ""),
                pin=bridge_cfg.get("pin", ""),
                address=bridge_cfg.get("address", ""),
                sensors=sensors,
            ),
        )
