"""
Read-side booking composition: availability first, then price.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.exceptions import EmployeeNotEligible, SlotUnavailable
from ..domain.models import BookingRequest, ServiceType, TimeRange, localize
from ..domain.pricing import PriceBreakdown
from .availability_checker import AvailabilityChecker, EmployeeDirectoryProtocol
from .pricing_service import PricingService

logger = logging.getLogger(__name__)


@dataclass
class BookingQuote:
    """A priced, conflict-free booking ready to be persisted by the caller."""
    owner_id: str
    room_id: str
    employee_id: Optional[str]
    service_type: ServiceType
    window: TimeRange
    breakdown: PriceBreakdown


class BookingPlanner:
    """
    Checks a requested booking and prices it.

    The quote is only valid at the moment it is produced: storing it is a
    separate write, and two concurrent requests for the same room can both be
    quoted. The persistence layer must re-check inside a serializable
    transaction (or hold a per-room lease) when it inserts the reservation.
    """

    def __init__(
        self,
        availability_checker: AvailabilityChecker,
        pricing_service: PricingService,
        employee_directory: EmployeeDirectoryProtocol,
        timezone: str,
    ) -> None:
        self._availability_checker = availability_checker
        self._pricing_service = pricing_service
        self._employee_directory = employee_directory
        self._timezone = timezone

    async def quote(self, owner_id: str, room_id: str, request: BookingRequest) -> BookingQuote:
        """
        Check the employee can take the booking, then room and employee
        availability, then price it.

        Raises:
            InvalidTimeRange: If the request does not end after it starts
            UnknownServiceType: If the service type is not recognised
            EmployeeNotEligible: If the employee does not work at the location
                or cannot run the service
            SlotUnavailable: If the room or the employee is already booked
        """
        service = ServiceType.parse(request.service_type)
        window = TimeRange(
            start=localize(request.start_time, self._timezone),
            end=localize(request.end_time, self._timezone),
        )

        if request.employee_id:
            await self._check_employee_eligible(request.employee_id, request.location_id, service)

        if not await self._availability_checker.is_available(room_id, window.start, window.end):
            alternatives = await self._availability_checker.suggest_alternative_times(
                room_id, window.start, window.duration_minutes()
            )
            logger.info("Room %s unavailable at %s", room_id, window)
            raise SlotUnavailable(f"Room {room_id}", window, alternatives)

        if request.employee_id and not await self._availability_checker.check_employee_availability(
            request.employee_id, window.start, window.end
        ):
            logger.info("Employee %s unavailable at %s", request.employee_id, window)
            raise SlotUnavailable(f"Employee {request.employee_id}", window)

        config = await self._pricing_service.get_config(owner_id)
        breakdown = await self._pricing_service.calculate_slot_price(config, request)

        return BookingQuote(
            owner_id=owner_id,
            room_id=room_id,
            employee_id=request.employee_id,
            service_type=service,
            window=window,
            breakdown=breakdown,
        )

    async def _check_employee_eligible(
        self,
        employee_id: str,
        location_id: str,
        service: ServiceType,
    ) -> None:
        staff = await self._employee_directory.employees_at_location(location_id)
        employee = next((e for e in staff if e.id == employee_id), None)

        if employee is None:
            raise EmployeeNotEligible(employee_id, f"does not work at location {location_id}")
        if not employee.can_serve(service):
            raise EmployeeNotEligible(
                employee_id,
                f"({employee.employee_type.value}) cannot run {service.value} sessions",
            )
