"""
Application service for room and employee availability.

The checker fetches reservations through a lookup adapter and delegates slot
layout and overlap tests to the domain-level ``SlotCalculator``. It only
answers read-side questions: nothing here reserves a slot, so a check followed
by a separate insert can race with a concurrent booking. Closing that gap
(serializable transaction or per-room lease around check and insert) belongs
to the persistence layer.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from itertools import islice
from typing import List, Optional, Protocol, Union

from pendulum import DateTime

from ..domain.models import AvailabilitySlot, Employee, Reservation, ServiceType, TimeRange, localize
from ..domain.slot_calculator import SlotCalculator, SlotSchedule

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS_PER_DAY = 3
MAX_SUGGESTIONS = 10


class ReservationLookupProtocol(Protocol):
    """Read-only access to stored reservations."""

    async def reservations_for_room(
        self,
        room_id: str,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[Reservation]:
        """Return the room's reservations overlapping ``[range_start, range_end)``."""

    async def reservations_for_employee(self, employee_id: str) -> List[Reservation]:
        """Return all reservations assigned to an employee."""


class EmployeeDirectoryProtocol(Protocol):
    """Read-only access to employees and their per-location rates."""

    async def employees_at_location(self, location_id: str) -> List[Employee]:
        """Return employees assigned to a location, in a stable order."""

    async def employee_hourly_rate(self, employee_id: str, location_id: str) -> Optional[Decimal]:
        """Return the employee's hourly rate at a location, if one is set."""


class AvailabilityChecker:
    """
    Answers availability questions for rooms and employees.

    Conflicts are ordinary results (``False`` or ``is_available=False``
    slots), not exceptions.
    """

    def __init__(
        self,
        reservation_lookup: ReservationLookupProtocol,
        employee_directory: EmployeeDirectoryProtocol,
        slot_calculator: SlotCalculator,
        max_suggestions_per_day: int = MAX_SUGGESTIONS_PER_DAY,
        max_suggestions: int = MAX_SUGGESTIONS,
    ) -> None:
        self._reservation_lookup = reservation_lookup
        self._employee_directory = employee_directory
        self._slot_calculator = slot_calculator
        self._max_suggestions_per_day = max_suggestions_per_day
        self._max_suggestions = max_suggestions

    def _window(self, start_time: datetime, end_time: datetime) -> TimeRange:
        timezone = self._slot_calculator.timezone
        return TimeRange(start=localize(start_time, timezone), end=localize(end_time, timezone))

    async def is_available(self, room_id: str, start_time: datetime, end_time: datetime) -> bool:
        """
        Check whether a room is free for the whole window.

        Reservations are fetched for the exact window rather than its calendar
        day, so bookings spanning midnight are caught too.

        Raises:
            InvalidTimeRange: If the window does not end after it starts
        """
        window = self._window(start_time, end_time)

        reservations = await self._reservation_lookup.reservations_for_room(
            room_id, window.start, window.end
        )

        conflict = self._slot_calculator.has_conflict(window, reservations)
        logger.debug("Room %s %s for %s", room_id, "busy" if conflict else "free", window)
        return not conflict

    async def get_available_slots(
        self,
        room_id: str,
        day: date,
        duration_minutes: int = 60,
    ) -> SlotSchedule:
        """
        Lay out the day's candidate slots for a room.

        Args:
            room_id: Room to check
            day: Calendar day in the business time zone
            duration_minutes: Length of the booking

        Returns:
            Chronological, restartable SlotSchedule for the opening hours
        """
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be greater than zero, got {duration_minutes}")

        fetch_window = self._slot_calculator.fetch_window(day, duration_minutes)
        reservations = await self._reservation_lookup.reservations_for_room(
            room_id, fetch_window.start, fetch_window.end
        )

        return self._slot_calculator.build_day_schedule(day, reservations, duration_minutes)

    async def get_occupied_slots(self, room_id: str, day: date) -> List[AvailabilitySlot]:
        """Active reservations of a room on a calendar day, as unavailable slots."""
        midnight = self._slot_calculator.business_hours.start_of_day(day)
        reservations = await self._reservation_lookup.reservations_for_room(
            room_id, midnight, midnight.add(days=1)
        )

        return [
            AvailabilitySlot(
                start_time=reservation.start_time,
                end_time=reservation.end_time,
                is_available=False,
                employee_id=reservation.employee_id,
            )
            for reservation in sorted(
                SlotCalculator.active(reservations), key=lambda r: r.start_time
            )
        ]

    async def check_employee_availability(
        self,
        employee_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> bool:
        """
        Check whether an employee has no active reservation overlapping the window.
        """
        return await self._employee_is_free(employee_id, self._window(start_time, end_time))

    async def _employee_is_free(self, employee_id: str, window: TimeRange) -> bool:
        reservations = await self._reservation_lookup.reservations_for_employee(employee_id)
        return not self._slot_calculator.has_conflict(window, reservations)

    async def get_available_employees(
        self,
        location_id: str,
        room_id: str,
        service_type: Union[ServiceType, str],
        start_time: datetime,
        end_time: datetime,
    ) -> List[Employee]:
        """
        Employees of a location who can run the service and are free for the window.

        ``room_id`` is accepted for call-site symmetry with the room checks;
        room availability is answered by ``is_available``. Candidates are
        checked one after another and keep the directory's order.

        Raises:
            UnknownServiceType: If the service type is not recognised
            InvalidTimeRange: If the window does not end after it starts
        """
        service = ServiceType.parse(service_type)
        window = self._window(start_time, end_time)

        candidates = await self._employee_directory.employees_at_location(location_id)
        compatible = [employee for employee in candidates if employee.can_serve(service)]

        available: List[Employee] = []
        for employee in compatible:
            if await self._employee_is_free(employee.id, window):
                available.append(employee)

        logger.debug(
            "Location %s: %d of %d %s employees free",
            location_id,
            len(available),
            len(compatible),
            service.value,
        )
        return available

    async def suggest_alternative_times(
        self,
        room_id: str,
        preferred_date: date,
        duration_minutes: int = 60,
        days_to_check: int = 7,
    ) -> List[AvailabilitySlot]:
        """
        Suggest free slots on the preferred day and the days after it.

        Takes at most a few slots per day and stops scanning once the overall
        cap is reached. Results stay in chronological order.
        """
        if days_to_check <= 0:
            raise ValueError(f"days_to_check must be greater than zero, got {days_to_check}")

        first_day = self._slot_calculator.business_hours.start_of_day(preferred_date)
        suggestions: List[AvailabilitySlot] = []

        for offset in range(days_to_check):
            schedule = await self.get_available_slots(
                room_id, first_day.add(days=offset), duration_minutes
            )

            day_slots = list(islice(schedule.available(), self._max_suggestions_per_day))
            suggestions.extend(day_slots[: self._max_suggestions - len(suggestions)])

            if len(suggestions) >= self._max_suggestions:
                break

        return suggestions
