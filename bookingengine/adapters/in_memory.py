"""
In-memory implementations of the lookup and store protocols.

Used by tests and by the CLI when it runs against a JSON fixture instead of a
real database.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from pendulum import DateTime

from ..domain.models import Employee, Reservation, TimeRange
from ..domain.pricing import PricingConfig


class InMemoryReservationStore:
    """Holds reservations in insertion order."""

    def __init__(self, reservations: Iterable[Reservation] = ()):
        self._reservations: List[Reservation] = list(reservations)

    def add(self, reservation: Reservation) -> Reservation:
        self._reservations.append(reservation)
        return reservation

    def all(self) -> List[Reservation]:
        return list(self._reservations)

    async def reservations_for_room(
        self,
        room_id: str,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[Reservation]:
        window = TimeRange(start=range_start, end=range_end)
        return [
            reservation
            for reservation in self._reservations
            if reservation.room_id == room_id and reservation.time_range.overlaps(window)
        ]

    async def reservations_for_employee(self, employee_id: str) -> List[Reservation]:
        return [
            reservation
            for reservation in self._reservations
            if reservation.employee_id == employee_id
        ]


class InMemoryEmployeeDirectory:
    """
    Employees and their location assignments.

    An employee can work at several locations with a different hourly rate at
    each; ``None`` means the location's base rate applies.
    """

    def __init__(self):
        self._employees: Dict[str, Employee] = {}
        self._assignments: List[Tuple[str, str, Optional[Decimal]]] = []

    def add_employee(self, employee: Employee) -> Employee:
        self._employees[employee.id] = employee
        return employee

    def assign(
        self,
        employee_id: str,
        location_id: str,
        hourly_rate: Optional[Decimal] = None,
    ) -> None:
        if employee_id not in self._employees:
            raise KeyError(f"Unknown employee: {employee_id}")
        self._assignments = [
            entry
            for entry in self._assignments
            if not (entry[0] == employee_id and entry[1] == location_id)
        ]
        self._assignments.append((employee_id, location_id, hourly_rate))

    def get(self, employee_id: str) -> Optional[Employee]:
        return self._employees.get(employee_id)

    def all(self) -> List[Employee]:
        return list(self._employees.values())

    async def employees_at_location(self, location_id: str) -> List[Employee]:
        return [
            self._employees[employee_id]
            for employee_id, assigned_location, _ in self._assignments
            if assigned_location == location_id
        ]

    async def employee_hourly_rate(self, employee_id: str, location_id: str) -> Optional[Decimal]:
        for assigned_employee, assigned_location, hourly_rate in self._assignments:
            if assigned_employee == employee_id and assigned_location == location_id:
                return hourly_rate
        return None


class InMemoryPricingConfigStore:
    """One pricing configuration per owner."""

    def __init__(self):
        self._configs: Dict[str, PricingConfig] = {}

    async def get_config(self, owner_id: str) -> Optional[PricingConfig]:
        return self._configs.get(owner_id)

    async def save_config(self, owner_id: str, config: PricingConfig) -> PricingConfig:
        self._configs[owner_id] = config
        return config
