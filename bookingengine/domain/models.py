"""
Domain models for reservations, employees and availability slots.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

import pendulum
from pendulum import DateTime

from .exceptions import InvalidTimeRange, UnknownServiceType

DEFAULT_TIMEZONE = "Europe/Warsaw"


class ServiceType(str, Enum):
    """Category of booked service; drives base rate and employee compatibility."""
    PHYSIOTHERAPY = "physiotherapy"
    PERSONAL_TRAINING = "personal_training"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Union["ServiceType", str]) -> "ServiceType":
        """
        Resolve a service type from an enum member or its string value.

        Raises:
            UnknownServiceType: If the value is not a recognised category
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownServiceType(value) from None


class EmployeeType(str, Enum):
    PHYSIOTHERAPIST = "physiotherapist"
    PERSONAL_TRAINER = "personal_trainer"


class ReservationStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidTimeRange(
                f"Start time {self.start} must be before end time {self.end}"
            )

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range shares any instant with another (touching ends do not)."""
        return self.start < other.end and self.end > other.start

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return TimeRange(start=max(self.start, other.start), end=min(self.end, other.end))

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass
class Reservation:
    """
    A booking as stored by the persistence layer.

    Only reservations that are not cancelled block a room or an employee.
    """
    id: str
    room_id: str
    employee_id: str
    start_time: DateTime
    end_time: DateTime
    service_type: ServiceType = ServiceType.OTHER
    status: ReservationStatus = ReservationStatus.CONFIRMED
    final_price: Optional[Decimal] = None
    is_dead_hour: bool = False
    client_name: str = ""

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise InvalidTimeRange(
                f"Reservation {self.id}: start time {self.start_time} "
                f"must be before end time {self.end_time}"
            )
        self.service_type = ServiceType.parse(self.service_type)
        self.status = ReservationStatus(self.status)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    @property
    def is_active(self) -> bool:
        """Whether this reservation still occupies its room and employee."""
        return self.status != ReservationStatus.CANCELLED


@dataclass
class Employee:
    """An employee who can be assigned to bookings at one or more locations."""
    id: str
    first_name: str
    last_name: str
    employee_type: EmployeeType

    def __post_init__(self):
        self.employee_type = EmployeeType(self.employee_type)

    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def can_serve(self, service_type: Union[ServiceType, str]) -> bool:
        """
        Check whether this employee's type is compatible with a service.

        physiotherapy needs a physiotherapist, personal_training needs a
        personal trainer, and any employee can run "other" services.
        """
        service = ServiceType.parse(service_type)
        if service is ServiceType.PHYSIOTHERAPY:
            return self.employee_type is EmployeeType.PHYSIOTHERAPIST
        if service is ServiceType.PERSONAL_TRAINING:
            return self.employee_type is EmployeeType.PERSONAL_TRAINER
        return True


@dataclass
class BookingRequest:
    """A requested booking to be priced and checked for availability."""
    service_type: Union[ServiceType, str]
    start_time: DateTime
    end_time: DateTime
    location_id: str
    employee_id: Optional[str] = None


@dataclass
class AvailabilitySlot:
    """
    A candidate booking window and whether it is free.
    """
    start_time: DateTime
    end_time: DateTime
    is_available: bool
    employee_id: Optional[str] = None

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, DD.MM.YYYY | HH:mm - HH:mm
        """
        start = self.start_time
        date_str = start.format("dddd, DD.MM.YYYY")
        return f"{date_str} | {start.format('HH:mm')} - {self.end_time.format('HH:mm')}"


def localize(moment: datetime, timezone: str) -> DateTime:
    """
    Express a moment as civil time in the given zone.

    Naive datetimes are read as wall-clock time in ``timezone``; aware ones are
    converted to it.
    """
    if moment.tzinfo is None:
        return pendulum.datetime(
            moment.year,
            moment.month,
            moment.day,
            moment.hour,
            moment.minute,
            moment.second,
            moment.microsecond,
            tz=timezone,
        )
    return pendulum.instance(moment).in_timezone(timezone)
