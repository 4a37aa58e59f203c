"""
Occupancy statistics for rooms.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List

from ..domain.models import Reservation, ReservationStatus, TimeRange, localize
from .availability_checker import ReservationLookupProtocol


@dataclass
class OccupancyStats:
    total_slots: int
    confirmed_slots: int
    total_revenue: Decimal
    dead_hour_slots: int
    dead_hour_revenue: Decimal
    occupancy_rate: float  # confirmed / total, 0..1


@dataclass
class OccupancyReport:
    room_id: str
    period: TimeRange
    reservations: List[Reservation]
    stats: OccupancyStats


class OccupancyService:
    """Summarises bookings of a room over a period."""

    def __init__(self, reservation_lookup: ReservationLookupProtocol, timezone: str) -> None:
        self._reservation_lookup = reservation_lookup
        self._timezone = timezone

    async def get_room_occupancy(
        self,
        room_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> OccupancyReport:
        period = TimeRange(
            start=localize(range_start, self._timezone),
            end=localize(range_end, self._timezone),
        )
        reservations = await self._reservation_lookup.reservations_for_room(
            room_id, period.start, period.end
        )
        reservations = sorted(reservations, key=lambda r: r.start_time)

        return OccupancyReport(
            room_id=room_id,
            period=period,
            reservations=reservations,
            stats=self.calculate_stats(reservations),
        )

    @staticmethod
    def calculate_stats(reservations: Iterable[Reservation]) -> OccupancyStats:
        """
        Count bookings and sum revenue.

        Revenue only includes confirmed reservations; cancelled and completed
        ones still count toward the total.
        """
        reservations = list(reservations)
        confirmed = [r for r in reservations if r.status == ReservationStatus.CONFIRMED]
        confirmed_dead_hour = [r for r in confirmed if r.is_dead_hour]

        total_slots = len(reservations)

        return OccupancyStats(
            total_slots=total_slots,
            confirmed_slots=len(confirmed),
            total_revenue=sum((r.final_price or Decimal(0) for r in confirmed), Decimal(0)),
            dead_hour_slots=sum(1 for r in reservations if r.is_dead_hour),
            dead_hour_revenue=sum(
                (r.final_price or Decimal(0) for r in confirmed_dead_hour), Decimal(0)
            ),
            occupancy_rate=len(confirmed) / total_slots if total_slots else 0.0,
        )
