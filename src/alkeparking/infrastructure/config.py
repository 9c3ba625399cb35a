# File: src/alkeparking/infrastructure/config.py
"""
Configuration for AlkeParking

Settings come from an optional YAML file. Without a file every value has a
default, so the lot runs with 20 spaces and non-negative tiered pricing.

Example config.yaml:

    lot_name: AlkeParking
    max_vehicles: 20
    pricing_strategy: tiered
    log_level: INFO
    log_file: logs/alkeparking.log

The file named by the ALKEPARKING_CONFIG environment variable is used when
no path is given explicitly.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import os

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..domain.aggregates import DEFAULT_CAPACITY, ParkingPolicies
from ..domain.strategies import PricingStrategy, PricingStrategyFactory


CONFIG_ENV_VAR = "ALKEPARKING_CONFIG"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(ValueError):
    """Raised for unreadable or invalid configuration"""
    pass


class Settings(BaseModel):
    """Application settings"""

    model_config = ConfigDict(extra="forbid")

    lot_name: str = Field(default="AlkeParking", min_length=1)
    max_vehicles: int = Field(default=DEFAULT_CAPACITY, ge=1)
    pricing_strategy: str = Field(default=PricingStrategyFactory.DEFAULT)
    log_level: str = Field(default="WARNING")
    log_file: Optional[str] = None

    @field_validator('pricing_strategy')
    @classmethod
    def validate_pricing_strategy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in PricingStrategyFactory.available_types():
            raise ValueError(
                f"pricing_strategy must be one of {PricingStrategyFactory.available_types()}"
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(LOG_LEVELS)}")
        return v

    def create_policies(self) -> ParkingPolicies:
        return ParkingPolicies(max_vehicles=self.max_vehicles)

    def create_pricing_strategy(self) -> PricingStrategy:
        return PricingStrategyFactory.create_by_type(self.pricing_strategy)


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a YAML file
    Falls back to ALKEPARKING_CONFIG, then to defaults when no file is named
    Raises: ConfigurationError if the named file is missing or invalid
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return Settings()

    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    return settings_from_dict(data or {}, source=str(config_path))


def settings_from_dict(data: Any, source: str = "<dict>") -> Settings:
    """Validate a mapping of settings"""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {source} must be a mapping")

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {source}: {e}") from e


def dump_settings(settings: Settings) -> str:
    """Render settings back to YAML"""
    data: Dict[str, Any] = settings.model_dump(exclude_none=True)
    return yaml.safe_dump(data, sort_keys=False)
