"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import DEFAULT_TIMEZONE
from .domain.pricing import PricingConfig, PricingEngine
from .domain.slot_calculator import BusinessHours, SlotCalculator

CONFIG_FILE_NAME = "bookingengine.yaml"


class BusinessHoursConfig(BaseModel):
    """Opening hours used to lay out bookable slots."""
    open_hour: int = 8
    close_hour: int = 20
    slot_step_minutes: int = 30
    allow_overrun: bool = True

    @field_validator("open_hour", "close_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("slot_step_minutes")
    @classmethod
    def validate_step(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("slot_step_minutes must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "BusinessHoursConfig":
        """Ensure the business opens before it closes."""
        if self.close_hour <= self.open_hour:
            raise ValueError("close_hour must be later than open_hour")
        return self

    def get_open_time(self) -> time:
        return time(hour=self.open_hour, minute=0)

    def get_close_time(self) -> time:
        return time(hour=self.close_hour, minute=0)


class SuggestionsConfig(BaseModel):
    """Limits for alternative-time suggestions."""
    per_day: int = Field(default=3, gt=0)
    max_total: int = Field(default=10, gt=0)
    days_to_check: int = Field(default=7, gt=0)


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = DEFAULT_TIMEZONE
    business_hours: BusinessHoursConfig = Field(default_factory=BusinessHoursConfig)
    suggestions: SuggestionsConfig = Field(default_factory=SuggestionsConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    data_file: Optional[Path] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the zone is a known IANA identifier."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a {CONFIG_FILE_NAME} file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if config.data_file is not None and not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config

    def build_business_hours(self) -> BusinessHours:
        return BusinessHours(
            open_time=self.business_hours.get_open_time(),
            close_time=self.business_hours.get_close_time(),
            slot_step_minutes=self.business_hours.slot_step_minutes,
            allow_overrun=self.business_hours.allow_overrun,
            timezone=self.timezone,
        )

    def build_slot_calculator(self) -> SlotCalculator:
        return SlotCalculator(business_hours=self.build_business_hours())

    def build_pricing_engine(self) -> PricingEngine:
        return PricingEngine(timezone=self.timezone)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look in the current directory first
    config_path = Path.cwd() / CONFIG_FILE_NAME

    if not config_path.exists():
        # Fall back to the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / CONFIG_FILE_NAME

    return config_path
