"""
Tests for the PricingService.
"""

import asyncio
from decimal import Decimal
from typing import List, Optional

import pendulum
import pytest

from bookingengine.adapters.in_memory import InMemoryEmployeeDirectory, InMemoryPricingConfigStore
from bookingengine.domain.models import BookingRequest, Employee
from bookingengine.domain.pricing import PricingConfig, PricingEngine
from bookingengine.services.pricing_service import PricingService

TZ = "Europe/Warsaw"
OWNER = "owner-1"


class CountingStore(InMemoryPricingConfigStore):
    """In-memory store that counts writes."""

    def __init__(self):
        super().__init__()
        self.saved: List[PricingConfig] = []

    async def save_config(self, owner_id, config):
        self.saved.append(config)
        return await super().save_config(owner_id, config)


class BrokenStore:
    """Store whose writes always fail."""

    def __init__(self, existing: Optional[PricingConfig] = None):
        self._existing = existing or PricingConfig()

    async def get_config(self, owner_id):
        return self._existing

    async def save_config(self, owner_id, config):
        raise ConnectionError("database is down")


def _directory() -> InMemoryEmployeeDirectory:
    directory = InMemoryEmployeeDirectory()
    directory.add_employee(Employee("emp-anna", "Anna", "Nowak", "physiotherapist"))
    directory.add_employee(Employee("emp-ewa", "Ewa", "Wiśniewska", "physiotherapist"))
    directory.assign("emp-anna", "loc-centrum", Decimal("180"))
    directory.assign("emp-ewa", "loc-centrum", Decimal("0"))
    return directory


def _service(store=None) -> PricingService:
    return PricingService(
        config_store=store or CountingStore(),
        employee_directory=_directory(),
        engine=PricingEngine(timezone=TZ),
    )


def _request(
    start: str = "2024-01-09 10:00",
    end: str = "2024-01-09 11:00",
    service_type: str = "physiotherapy",
    employee_id: Optional[str] = None,
) -> BookingRequest:
    return BookingRequest(
        service_type=service_type,
        start_time=pendulum.parse(start, tz=TZ),
        end_time=pendulum.parse(end, tz=TZ),
        location_id="loc-centrum",
        employee_id=employee_id,
    )


class TestGetConfig:
    """Tests for reading configuration."""

    def test_defaults_are_created_on_first_read(self):
        store = CountingStore()
        service = _service(store)

        config = asyncio.run(service.get_config(OWNER))

        assert config == PricingConfig()
        assert len(store.saved) == 1

    def test_defaults_are_created_only_once(self):
        store = CountingStore()
        service = _service(store)

        asyncio.run(service.get_config(OWNER))
        asyncio.run(service.get_config(OWNER))

        assert len(store.saved) == 1

    def test_custom_defaults(self):
        defaults = PricingConfig(base_rate_other=Decimal("90"))
        service = PricingService(
            config_store=InMemoryPricingConfigStore(),
            employee_directory=_directory(),
            engine=PricingEngine(timezone=TZ),
            defaults=defaults,
        )

        assert asyncio.run(service.get_config(OWNER)).base_rate_other == Decimal("90")


class TestSaveConfig:
    """Tests for validating and storing configuration."""

    def test_saved_values_are_read_back(self):
        service = _service()
        data = {
            "dead_hours_start": 6,
            "dead_hours_end": 14,
            "dead_hour_discount": "0.25",
            "base_rate_physiotherapy": "170",
            "base_rate_personal_training": "130",
            "base_rate_other": "95.50",
            "weekday_multiplier": "1.1",
            "weekend_multiplier": "1.5",
        }

        result = asyncio.run(service.save_config(OWNER, data))
        stored = asyncio.run(service.get_config(OWNER))

        assert result.success
        assert result.errors == []
        assert stored == result.config
        assert stored.dead_hours_start == 6
        assert stored.dead_hours_end == 14
        assert stored.dead_hour_discount == Decimal("0.25")
        assert stored.base_rate_physiotherapy == Decimal("170")
        assert stored.base_rate_personal_training == Decimal("130")
        assert stored.base_rate_other == Decimal("95.50")
        assert stored.weekday_multiplier == Decimal("1.1")
        assert stored.weekend_multiplier == Decimal("1.5")

    def test_partial_update_keeps_other_fields(self):
        service = _service()
        asyncio.run(service.save_config(OWNER, {"base_rate_other": "110"}))

        result = asyncio.run(service.save_config(OWNER, {"dead_hour_discount": "0.3"}))

        assert result.success
        assert result.config.base_rate_other == Decimal("110")
        assert result.config.dead_hour_discount == Decimal("0.3")
        assert result.config.base_rate_physiotherapy == Decimal("150")

    def test_invalid_config_reports_every_field_and_stores_nothing(self):
        store = CountingStore()
        service = _service(store)
        before = asyncio.run(service.get_config(OWNER))

        result = asyncio.run(
            service.save_config(
                OWNER,
                {"dead_hours_start": 25, "dead_hour_discount": "1.5", "base_rate_other": "90"},
            )
        )

        assert not result.success
        assert result.config is None
        assert {error.field for error in result.errors} == {"dead_hours_start", "dead_hour_discount"}
        assert asyncio.run(service.get_config(OWNER)) == before
        assert len(store.saved) == 1

    def test_store_failure_is_reported_as_general_error(self):
        service = _service(BrokenStore())

        result = asyncio.run(service.save_config(OWNER, {"base_rate_other": "110"}))

        assert not result.success
        assert [error.field for error in result.errors] == ["general"]


class TestPricing:
    """Tests for pricing requests through the service."""

    def test_employee_rate_at_location_is_used(self):
        service = _service()
        config = asyncio.run(service.get_config(OWNER))

        breakdown = asyncio.run(
            service.calculate_slot_price(config, _request(employee_id="emp-anna"))
        )

        assert breakdown.employee_rate == Decimal("180")
        assert breakdown.final_base_rate == Decimal("180")
        assert breakdown.base_price == Decimal("180.00")
        assert breakdown.final_price == Decimal("144.00")

    def test_zero_employee_rate_falls_back_to_base_rate(self):
        service = _service()
        config = asyncio.run(service.get_config(OWNER))

        breakdown = asyncio.run(service.calculate_slot_price(config, _request(employee_id="emp-ewa")))

        assert breakdown.employee_rate is None
        assert breakdown.final_base_rate == Decimal("150")

    def test_unassigned_employee_uses_base_rate(self):
        service = _service()
        config = asyncio.run(service.get_config(OWNER))

        breakdown = asyncio.run(
            service.calculate_slot_price(config, _request(employee_id="emp-unknown"))
        )

        assert breakdown.final_base_rate == Decimal("150")

    def test_preview_success(self):
        service = _service()

        result = asyncio.run(service.preview_price(OWNER, _request()))

        assert result.success
        assert result.error is None
        assert result.breakdown.final_price == Decimal("120.00")

    @pytest.mark.parametrize(
        "request_kwargs",
        [
            {"start": "2024-01-09 11:00", "end": "2024-01-09 10:00"},
            {"service_type": "massage"},
        ],
    )
    def test_preview_failure_is_a_value(self, request_kwargs):
        service = _service()

        result = asyncio.run(service.preview_price(OWNER, _request(**request_kwargs)))

        assert not result.success
        assert result.breakdown is None
        assert result.error
