import os
import sys

import keyring
import yaml
from loguru import logger

from settings_schema import EngineSettings, validate_settings

APP_VERSION = "1.0.0"


class YamlConfig:
    """Load and save settings to a YAML file with optional keyring storage."""

    SENSITIVE_KEYS = {
        "api_token",
    }

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"
        self.service = "wellness-engine"

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        if self.encrypt:
            for key in list(data.keys()):
                if key in self.SENSITIVE_KEYS:
                    secret = keyring.get_password(self.service, key)
                    if secret is not None:
                        data[key] = secret
                    else:
                        data.pop(key, None)
        return data

    def save(self, data: dict) -> None:
        out = dict(data)
        if self.encrypt:
            for key in self.SENSITIVE_KEYS:
                if key in out:
                    keyring.set_password(self.service, key, str(out[key]))
                    out[key] = True
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)


def load_settings(path: str | None = "settings.yaml") -> EngineSettings:
    """Read and validate engine settings; a missing file yields defaults."""
    if path is None:
        return EngineSettings()
    data = YamlConfig(path).load()
    settings = validate_settings(data)
    logger.debug("loaded settings from {}", path)
    return settings


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
