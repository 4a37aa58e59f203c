"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    BookingError,
    EmployeeNotEligible,
    InvalidPricingConfig,
    InvalidTimeRange,
    SlotUnavailable,
    UnknownServiceType,
)
from .models import (
    AvailabilitySlot,
    BookingRequest,
    Employee,
    EmployeeType,
    Reservation,
    ReservationStatus,
    ServiceType,
    TimeRange,
)
from .pricing import FieldError, PriceBreakdown, PricingConfig, PricingEngine, validate_pricing_config
from .slot_calculator import BusinessHours, SlotCalculator, SlotSchedule

__all__ = [
    "AvailabilitySlot",
    "BookingError",
    "BookingRequest",
    "BusinessHours",
    "Employee",
    "EmployeeNotEligible",
    "EmployeeType",
    "FieldError",
    "InvalidPricingConfig",
    "InvalidTimeRange",
    "PriceBreakdown",
    "PricingConfig",
    "PricingEngine",
    "Reservation",
    "ReservationStatus",
    "ServiceType",
    "SlotCalculator",
    "SlotSchedule",
    "SlotUnavailable",
    "TimeRange",
    "UnknownServiceType",
    "validate_pricing_config",
]
