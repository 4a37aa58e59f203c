"""
Price calculation for bookings.

Pure domain logic: a pricing configuration and a booking request go in, a
fully itemised price breakdown comes out. Employee rates are looked up by the
caller and passed in.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Mapping, Optional, Union

from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import InvalidPricingConfig, InvalidTimeRange
from .models import DEFAULT_TIMEZONE, BookingRequest, ServiceType, localize

CENT = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)
WEEKEND_DAYS = (5, 6)  # Saturday, Sunday


class PricingConfig(BaseModel):
    """
    Per-owner pricing rules.

    Dead hours are a daily window of discounted start times; ``dead_hours_start``
    greater than ``dead_hours_end`` means the window wraps past midnight.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    dead_hours_start: int = Field(default=8, ge=0, le=23)
    dead_hours_end: int = Field(default=16, ge=0, le=23)
    dead_hour_discount: Decimal = Field(default=Decimal("0.2"), ge=0, le=1)
    base_rate_physiotherapy: Decimal = Field(default=Decimal("150"), ge=0)
    base_rate_personal_training: Decimal = Field(default=Decimal("120"), ge=0)
    base_rate_other: Decimal = Field(default=Decimal("100"), ge=0)
    weekday_multiplier: Decimal = Field(default=Decimal("1.0"), gt=0)
    weekend_multiplier: Decimal = Field(default=Decimal("1.2"), gt=0)

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "PricingConfig":
        """
        Build a config from raw form/storage data.

        Raises:
            InvalidPricingConfig: With every field-level violation, not just the first
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise InvalidPricingConfig(_field_errors(exc)) from exc

    def base_rate_for(self, service_type: Union[ServiceType, str]) -> Decimal:
        service = ServiceType.parse(service_type)
        if service is ServiceType.PHYSIOTHERAPY:
            return self.base_rate_physiotherapy
        if service is ServiceType.PERSONAL_TRAINING:
            return self.base_rate_personal_training
        return self.base_rate_other


@dataclass(frozen=True)
class FieldError:
    """A validation failure attached to a single input field."""
    field: str
    message: str


def _field_errors(exc: ValidationError) -> List[FieldError]:
    errors: List[FieldError] = []
    for error in exc.errors():
        location = error.get("loc") or ()
        field = ".".join(str(part) for part in location) or "general"
        errors.append(FieldError(field=field, message=error["msg"]))
    return errors


def validate_pricing_config(data: Mapping[str, Any]) -> List[FieldError]:
    """
    Collect all field-level problems in a pricing configuration.

    Returns an empty list when the data is valid.
    """
    try:
        PricingConfig.from_data(data)
    except InvalidPricingConfig as exc:
        return exc.errors
    return []


def round_currency(amount: Decimal) -> Decimal:
    """Round to currency precision, halves rounding away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceBreakdown:
    """
    Every intermediate value of a price calculation, kept for display and audit.
    """
    base_rate: Decimal
    employee_rate: Optional[Decimal]
    final_base_rate: Decimal
    is_dead_hour: bool
    dead_hour_discount: Optional[Decimal]
    time_multiplier: Decimal
    duration_hours: Decimal
    base_price: Decimal
    discount_amount: Decimal
    final_price: Decimal

    def to_dict(self) -> dict:
        return {
            "base_rate": str(self.base_rate),
            "employee_rate": None if self.employee_rate is None else str(self.employee_rate),
            "final_base_rate": str(self.final_base_rate),
            "is_dead_hour": self.is_dead_hour,
            "dead_hour_discount": (
                None if self.dead_hour_discount is None else str(self.dead_hour_discount)
            ),
            "time_multiplier": str(self.time_multiplier),
            "duration_hours": str(self.duration_hours),
            "base_price": str(self.base_price),
            "discount_amount": str(self.discount_amount),
            "final_price": str(self.final_price),
        }


class PricingEngine:
    """
    Calculates booking prices from a pricing configuration.

    Algorithm:
    1. Duration in (fractional) hours
    2. Rate: the employee's hourly rate when positive, else the service base rate
    3. Weekday or weekend multiplier from the start day
    4. Dead-hour discount when the start hour falls in the dead-hour window
    5. Round base price, discount and final price to cents (half-up)

    Hour of day and day of week are evaluated in the business time zone.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.timezone = timezone

    def localize(self, moment: datetime) -> DateTime:
        return localize(moment, self.timezone)

    def calculate_price(
        self,
        config: PricingConfig,
        request: BookingRequest,
        employee_rate: Optional[Union[Decimal, int, float, str]] = None,
    ) -> PriceBreakdown:
        """
        Calculate the price breakdown for a booking request.

        Args:
            config: Validated pricing configuration of the business owner
            request: Requested service and time window
            employee_rate: Optional hourly rate of the assigned employee

        Returns:
            PriceBreakdown with all intermediate values populated

        Raises:
            InvalidTimeRange: If the request does not end after it starts
            UnknownServiceType: If the service type is not recognised
        """
        start = self.localize(request.start_time)
        end = self.localize(request.end_time)

        if end <= start:
            raise InvalidTimeRange(f"Start time {start} must be before end time {end}")

        duration_hours = Decimal(str((end - start).total_seconds())) / SECONDS_PER_HOUR
        base_rate = self.base_rate_for(config, request.service_type)

        rate = _as_decimal(employee_rate)
        if rate is not None and rate <= 0:
            rate = None
        final_base_rate = rate if rate is not None else base_rate

        is_dead_hour = self.is_dead_hour(config, start)
        time_multiplier = self.time_multiplier(config, start)

        # Only the final price is rounded from the exact amount; the shown
        # discount is whatever separates it from the rounded base price.
        raw_price = final_base_rate * duration_hours * time_multiplier
        raw_discount = raw_price * config.dead_hour_discount if is_dead_hour else Decimal(0)
        final_price = round_currency(raw_price - raw_discount)
        base_price = round_currency(raw_price)
        discount_amount = base_price - final_price

        return PriceBreakdown(
            base_rate=base_rate,
            employee_rate=rate,
            final_base_rate=final_base_rate,
            is_dead_hour=is_dead_hour,
            dead_hour_discount=config.dead_hour_discount if is_dead_hour else None,
            time_multiplier=time_multiplier,
            duration_hours=duration_hours,
            base_price=base_price,
            discount_amount=discount_amount,
            final_price=final_price,
        )

    @staticmethod
    def base_rate_for(config: PricingConfig, service_type: Union[ServiceType, str]) -> Decimal:
        return config.base_rate_for(service_type)

    def is_dead_hour(self, config: PricingConfig, moment: datetime) -> bool:
        """Check if a start time falls into the dead-hour window."""
        hour = self.localize(moment).hour

        if config.dead_hours_start <= config.dead_hours_end:
            return config.dead_hours_start <= hour < config.dead_hours_end

        # Window wraps midnight, e.g. 22:00 - 06:00
        return hour >= config.dead_hours_start or hour < config.dead_hours_end

    def time_multiplier(self, config: PricingConfig, moment: datetime) -> Decimal:
        if self.localize(moment).weekday() in WEEKEND_DAYS:
            return config.weekend_multiplier
        return config.weekday_multiplier


def _as_decimal(value: Optional[Union[Decimal, int, float, str]]) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
