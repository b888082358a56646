"""Configuration Management for timedim

Loads the date handling settings of service layers and the logging settings
from hierarchical YAML files with environment overrides. The temporal
processors never read this configuration themselves: callers pass the
values they need (fragments orders, reverse_time_zone) explicitly.
"""

import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..processors.core.format_detector import FormatDetector
from ..processors.core.temporal_types import DEFAULT_FRAGMENTS_ORDER, DateFragmentsOrder
from .error_handler import ConfigurationError, InvalidDateFormatError
from .logging_manager import LoggingManager

ENV_PREFIX = "TIMEDIM_"


class LayerDateConfig(BaseModel):
    """Date handling of one service layer."""
    service_date_format: Optional[str] = Field(default=None)
    external_date_format: Optional[str] = Field(default=None)
    reverse_time_zone: bool = Field(default=False)
    display_language: str = Field(default="en", pattern="^(en|fr)$")

    @field_validator("service_date_format", "external_date_format")
    @classmethod
    def validate_date_format(cls, v):
        """Reject formats that do not give a fragments order"""
        if v is None:
            return v
        try:
            FormatDetector().get_fragment_order(v)
        except InvalidDateFormatError as e:
            raise ValueError(str(e)) from e
        return v

    def get_service_fragments_order(self) -> Optional[DateFragmentsOrder]:
        if not self.service_date_format:
            return None
        return FormatDetector().get_fragment_order(self.service_date_format)

    def get_external_fragments_order(self) -> Optional[DateFragmentsOrder]:
        if not self.external_date_format:
            return None
        return FormatDetector().get_fragment_order(self.external_date_format)

    def get_external_fragments_order_or_default(self) -> DateFragmentsOrder:
        return self.get_external_fragments_order() or DEFAULT_FRAGMENTS_ORDER


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_to_console: bool = Field(default=True)
    file_path: Optional[str] = Field(default=None)
    backup_count: int = Field(default=5, ge=1, le=20)


class EngineConfig(BaseModel):
    """Main timedim configuration."""
    model_config = ConfigDict(validate_assignment=True)

    layer_dates: LayerDateConfig = Field(default_factory=LayerDateConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[Path] = None, environment: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional configuration directory
            environment: Environment name, TIMEDIM_ENV or 'development' by default
        """
        self.config_base_path = Path(config_path) if config_path else self._get_default_config_path()
        self.environment = environment or os.getenv("TIMEDIM_ENV", "development")
        self._config: Optional[EngineConfig] = None
        self._lock = threading.Lock()
        self.logger = LoggingManager.get_logger(__name__)

        self.config_files = self._get_config_files()

    @staticmethod
    def _get_default_config_path() -> Path:
        config_locations = [
            Path("config"),
            Path.home() / ".timedim",
        ]

        for location in config_locations:
            if location.is_dir():
                return location
        return Path("config")

    def _get_config_files(self) -> Dict[str, Path]:
        """Configuration files, lowest precedence first."""
        base_dir = self.config_base_path
        return {
            "default": base_dir / "default_config.yaml",
            "environment": base_dir / f"{self.environment}.yaml",
            "local": base_dir / "local.yaml",
        }

    @property
    def config(self) -> EngineConfig:
        return self.load_config()

    def load_config(self) -> EngineConfig:
        """Load and validate configuration with hierarchical overrides.

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If a file is unreadable or validation fails
        """
        with self._lock:
            if self._config:
                return self._config

            config_data: Dict[str, Any] = {}
            for config_type, config_file in self.config_files.items():
                if config_file.exists():
                    self.logger.info(f"Loading {config_type} config from {config_file}")
                    self._deep_merge(config_data, self._load_yaml_file(config_file))

            env_overrides = self._get_env_overrides()
            if env_overrides:
                self.logger.info(f"Applying environment overrides: {list(env_overrides.keys())}")
                self._deep_merge(config_data, env_overrides)

            try:
                self._config = EngineConfig(**config_data)
            except ValidationError as e:
                self.logger.error(f"Configuration validation failed: {e}")
                raise ConfigurationError(f"Invalid configuration: {e}") from e

            return self._config

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        try:
            with open(file_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to read YAML file {file_path}: {e}")
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid YAML in {file_path}: top level is not a mapping")
        return data

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Get configuration overrides from environment variables.

        Environment variables follow pattern: TIMEDIM_<SECTION>_<KEY>
        Example: TIMEDIM_LAYER_DATES_REVERSE_TIME_ZONE -> layer_dates.reverse_time_zone
        """
        overrides: Dict[str, Any] = {}
        sections = sorted(EngineConfig.model_fields, key=len, reverse=True)

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX) or key == f"{ENV_PREFIX}ENV":
                continue

            name = key[len(ENV_PREFIX):].lower()
            for section in sections:
                if name.startswith(f"{section}_"):
                    overrides.setdefault(section, {})[name[len(section) + 1:]] = self._convert_env_value(value)
                    break
            else:
                self.logger.warning(f"Ignoring unknown configuration variable {key}")

        return overrides

    @staticmethod
    def _convert_env_value(value: str) -> Union[str, int, bool]:
        if value.lower() in ("true", "false"):
            return value.lower() == "true"
        try:
            return int(value)
        except ValueError:
            return value

    @staticmethod
    def _deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]):
        """Recursively merge nested dictionaries."""
        for key, value in update_dict.items():
            if isinstance(value, dict) and isinstance(base_dict.get(key), dict):
                ConfigManager._deep_merge(base_dict[key], value)
            else:
                base_dict[key] = value

    def update_config(self, updates: Dict[str, Any]) -> EngineConfig:
        """Apply updates on top of the loaded configuration.

        Raises:
            ConfigurationError: If the updated configuration is invalid
        """
        current = self.load_config()
        with self._lock:
            config_dict = current.model_dump()
            self._deep_merge(config_dict, updates)
            try:
                self._config = EngineConfig(**config_dict)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid configuration update: {e}") from e
            return self._config

    def save_config(self, target: str = "local"):
        """Save the current configuration to one of the hierarchy files."""
        if target not in self.config_files:
            raise ConfigurationError(f"Invalid target: {target}")

        config_dict = self.load_config().model_dump()
        target_file = self.config_files[target]
        target_file.parent.mkdir(parents=True, exist_ok=True)
        with open(target_file, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

        self.logger.info(f"Configuration saved to {target_file}")

    def configure_logging(self):
        """Apply the logging section to the timedim loggers."""
        logging_config = self.load_config().logging
        return LoggingManager().configure(
            level=logging_config.level,
            log_file=logging_config.file_path,
            log_to_console=logging_config.log_to_console,
            backup_count=logging_config.backup_count,
        )
