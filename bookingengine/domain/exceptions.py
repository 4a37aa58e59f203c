"""
Domain-specific exception hierarchy for the booking engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Sequence

if TYPE_CHECKING:
    from .models import AvailabilitySlot, TimeRange
    from .pricing import FieldError


class BookingError(Exception):
    """Base class for all booking-engine errors."""


class InvalidTimeRange(BookingError, ValueError):
    """Raised when a time window does not end after it starts."""


class UnknownServiceType(BookingError, ValueError):
    """Raised when a service type is not one of the recognised categories."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Unknown service type: {value!r}. "
            f"Expected one of: physiotherapy, personal_training, other."
        )


class InvalidPricingConfig(BookingError, ValueError):
    """Raised when pricing configuration fields are outside their bounds."""

    def __init__(self, errors: Sequence["FieldError"]):
        self.errors: List["FieldError"] = list(errors)
        details = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        super().__init__(f"Invalid pricing configuration: {details}")


class SlotUnavailable(BookingError):
    """Raised by the booking planner when a room or employee is already booked."""

    def __init__(
        self,
        resource: str,
        window: "TimeRange",
        alternatives: Sequence["AvailabilitySlot"] = (),
    ):
        self.resource = resource
        self.window = window
        self.alternatives: List["AvailabilitySlot"] = list(alternatives)
        super().__init__(f"{resource} is not available at {window}")


class EmployeeNotEligible(BookingError):
    """Raised when the chosen employee cannot take a booking at a location."""

    def __init__(self, employee_id: str, reason: str):
        self.employee_id = employee_id
        self.reason = reason
        super().__init__(f"Employee {employee_id} {reason}")
