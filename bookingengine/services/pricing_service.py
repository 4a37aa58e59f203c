"""
Application service for owner pricing configuration and price previews.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol

from ..domain.exceptions import BookingError, InvalidPricingConfig
from ..domain.models import BookingRequest
from ..domain.pricing import FieldError, PriceBreakdown, PricingConfig, PricingEngine
from .availability_checker import EmployeeDirectoryProtocol

logger = logging.getLogger(__name__)


class PricingConfigStoreProtocol(Protocol):
    """Persistence for the single pricing configuration of each owner."""

    async def get_config(self, owner_id: str) -> Optional[PricingConfig]:
        """Return the owner's stored configuration, or None if there is none yet."""

    async def save_config(self, owner_id: str, config: PricingConfig) -> PricingConfig:
        """Insert or replace the owner's configuration and return what was stored."""


@dataclass
class ConfigSaveResult:
    success: bool
    config: Optional[PricingConfig] = None
    errors: List[FieldError] = field(default_factory=list)


@dataclass
class PricePreviewResult:
    success: bool
    breakdown: Optional[PriceBreakdown] = None
    error: Optional[str] = None


class PricingService:
    """
    Reads, validates and stores pricing configuration, and prices requests.

    Every owner has exactly one configuration; it is created from the
    defaults the first time it is read.
    """

    def __init__(
        self,
        config_store: PricingConfigStoreProtocol,
        employee_directory: EmployeeDirectoryProtocol,
        engine: PricingEngine,
        defaults: Optional[PricingConfig] = None,
    ) -> None:
        self._config_store = config_store
        self._employee_directory = employee_directory
        self._engine = engine
        self._defaults = defaults or PricingConfig()

    async def get_config(self, owner_id: str) -> PricingConfig:
        config = await self._config_store.get_config(owner_id)
        if config is None:
            logger.info("No pricing config for owner %s, creating defaults", owner_id)
            config = await self._config_store.save_config(owner_id, self._defaults)
        return config

    async def save_config(self, owner_id: str, data: Mapping[str, Any]) -> ConfigSaveResult:
        """
        Validate and store an owner's configuration.

        ``data`` may be partial; missing fields keep their current values. The
        configuration is stored only if every field is valid, otherwise all
        field errors are returned and nothing is written.
        """
        current = await self.get_config(owner_id)
        merged = {**current.model_dump(), **dict(data)}

        try:
            candidate = PricingConfig.from_data(merged)
        except InvalidPricingConfig as exc:
            logger.debug("Rejected pricing config for owner %s: %s", owner_id, exc)
            return ConfigSaveResult(success=False, errors=exc.errors)

        try:
            stored = await self._config_store.save_config(owner_id, candidate)
        except Exception:
            logger.exception("Failed to store pricing config for owner %s", owner_id)
            return ConfigSaveResult(
                success=False,
                errors=[FieldError(field="general", message="Failed to save configuration")],
            )

        return ConfigSaveResult(success=True, config=stored)

    async def calculate_slot_price(
        self,
        config: PricingConfig,
        request: BookingRequest,
    ) -> PriceBreakdown:
        """
        Price a request, using the assigned employee's rate at the location if set.
        """
        employee_rate = None
        if request.employee_id:
            employee_rate = await self._employee_directory.employee_hourly_rate(
                request.employee_id, request.location_id
            )

        return self._engine.calculate_price(config, request, employee_rate=employee_rate)

    async def preview_price(self, owner_id: str, request: BookingRequest) -> PricePreviewResult:
        """Price a request for display; validation problems come back as a value."""
        try:
            config = await self.get_config(owner_id)
            breakdown = await self.calculate_slot_price(config, request)
        except BookingError as exc:
            return PricePreviewResult(success=False, error=str(exc))

        return PricePreviewResult(success=True, breakdown=breakdown)
