"""
Configuration
-------------
YAML configuration with environment variable overrides.

Lookup order for every key: MURMUR_<SECTION>_<KEY> environment variable,
then the YAML file, then the built-in default. The capture stream shape
(mono, 16 kHz, 1024-sample blocks) is fixed and not configurable.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import os

import yaml

ENV_PREFIX = "MURMUR"


class ConfigManager:
    """
    Centralized configuration management.
    Loads configuration from YAML with environment variable overrides.
    """

    def __init__(self, config_path: str = "config.yaml"):
        self._config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._logger = logging.getLogger("murmur.infra.config")

        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file."""
        if self._config_path.exists():
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            if not isinstance(self._config, dict):
                raise ValueError(f"Config file must contain a mapping: {self._config_path}")
            self._logger.info(f"Loaded config from {self._config_path}")
        else:
            self._config = {}
            self._logger.warning(f"Config file not found: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Supports dot notation: 'section.key'
        Environment variables override file config.
        """
        env_key = f"{ENV_PREFIX}_{key.upper().replace('.', '_')}"
        env_value = os.getenv(env_key)
        if env_value is not None:
            return yaml.safe_load(env_value) if env_value else None

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (runtime only, not persisted)."""
        parts = key.split(".")
        config = self._config

        for part in parts[:-1]:
            config = config.setdefault(part, {})

        config[parts[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire configuration section."""
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()


@dataclass
class ModelSettings:
    path: Optional[str] = None
    device: str = "auto"
    compute_type: str = "default"
    language: Optional[str] = None


@dataclass
class AudioSettings:
    max_retention_seconds: Optional[float] = None  # None keeps everything


@dataclass
class LoggingSettings:
    level: str = "INFO"
    dir: str = "logs"
    console: bool = False


@dataclass
class AppConfig:
    """Typed view over the configuration file."""
    model: ModelSettings = field(default_factory=ModelSettings)
    audio: AudioSettings = field(default_factory=AudioSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def load(
        cls,
        config_path: str = "config.yaml",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "AppConfig":
        """
        Build settings from a config file, env vars, then ``overrides``.

        ``overrides`` uses dot-notation keys; None values are ignored so
        unset command-line flags fall through to the file.
        """
        manager = ConfigManager(config_path)
        overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

        def get(key: str, default: Any = None) -> Any:
            if key in overrides:
                return overrides[key]
            return manager.get(key, default)

        defaults = cls()
        retention = get("audio.max_retention_seconds")

        return cls(
            model=ModelSettings(
                path=get("model.path", defaults.model.path),
                device=get("model.device", defaults.model.device),
                compute_type=get("model.compute_type", defaults.model.compute_type),
                language=get("model.language", defaults.model.language),
            ),
            audio=AudioSettings(
                max_retention_seconds=float(retention) if retention is not None else None,
            ),
            logging=LoggingSettings(
                level=str(get("logging.level", defaults.logging.level)).upper(),
                dir=str(get("logging.dir", defaults.logging.dir)),
                console=bool(get("logging.console", defaults.logging.console)),
            ),
        )
