"""
Core logic for generating bookable slots and detecting conflicts.

Pure domain logic: reservations are handed in by the caller, nothing here
talks to storage.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Iterable, Iterator, List

import pendulum
from pendulum import DateTime

from .models import DEFAULT_TIMEZONE, AvailabilitySlot, Reservation, TimeRange, localize


@dataclass
class BusinessHours:
    """
    Daily window in which bookings can start.

    Slot starts are laid out every ``slot_step_minutes`` from ``open_time``
    while the start is before ``close_time``. With ``allow_overrun`` a slot
    may end after closing (19:30 - 20:30 for an hour-long booking); without
    it every slot must end by ``close_time``.
    """
    open_time: time = time(8, 0)
    close_time: time = time(20, 0)
    slot_step_minutes: int = 30
    allow_overrun: bool = True
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self):
        if self.slot_step_minutes <= 0:
            raise ValueError(
                f"slot_step_minutes must be greater than zero, got {self.slot_step_minutes}"
            )
        if self.close_time <= self.open_time:
            raise ValueError("close_time must be later than open_time")

    def start_of_day(self, day: date) -> DateTime:
        """Midnight of a calendar day in the business time zone."""
        if isinstance(day, datetime):
            return localize(day, self.timezone).start_of("day")
        return pendulum.datetime(day.year, day.month, day.day, tz=self.timezone)

    def window_for_day(self, day: date) -> TimeRange:
        """Opening hours of a specific day."""
        midnight = self.start_of_day(day)
        start = midnight.set(hour=self.open_time.hour, minute=self.open_time.minute)
        end = midnight.set(hour=self.close_time.hour, minute=self.close_time.minute)
        return TimeRange(start=start, end=end)


@dataclass
class SlotSchedule:
    """
    Lazily generated, restartable sequence of one day's candidate slots.

    Each iteration walks the day again from the same reservation snapshot, so
    the schedule can be consumed more than once.
    """
    opening: TimeRange
    duration_minutes: int
    slot_step_minutes: int
    allow_overrun: bool
    blocking: List[TimeRange] = field(default_factory=list)

    def __iter__(self) -> Iterator[AvailabilitySlot]:
        current = self.opening.start

        while current < self.opening.end:
            slot_end = current.add(minutes=self.duration_minutes)
            if not self.allow_overrun and slot_end > self.opening.end:
                break

            window = TimeRange(start=current, end=slot_end)
            is_available = not any(window.overlaps(busy) for busy in self.blocking)

            yield AvailabilitySlot(start_time=current, end_time=slot_end, is_available=is_available)

            current = current.add(minutes=self.slot_step_minutes)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def available(self) -> Iterator[AvailabilitySlot]:
        """Only the slots that are free."""
        return (slot for slot in self if slot.is_available)


class SlotCalculator:
    """
    Builds day schedules and checks windows against existing reservations.

    Overlap uses half-open intervals: a booking ending at 11:00 does not
    conflict with one starting at 11:00. Cancelled reservations never block.
    """

    def __init__(self, business_hours: BusinessHours):
        self.business_hours = business_hours

    @property
    def timezone(self) -> str:
        return self.business_hours.timezone

    def day_window(self, day: date) -> TimeRange:
        return self.business_hours.window_for_day(day)

    def fetch_window(self, day: date, duration_minutes: int) -> TimeRange:
        """
        The span a day's schedule can touch, including an overrunning last slot.
        """
        opening = self.day_window(day)
        return TimeRange(start=opening.start, end=opening.end.add(minutes=duration_minutes))

    def build_day_schedule(
        self,
        day: date,
        reservations: Iterable[Reservation],
        duration_minutes: int = 60,
    ) -> SlotSchedule:
        """
        Lay out one day of candidate slots, marking those that clash.

        Args:
            day: Calendar day in the business time zone
            reservations: Reservations of the room around that day
            duration_minutes: Length of the booking to place

        Returns:
            SlotSchedule over the day's opening hours
        """
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be greater than zero, got {duration_minutes}")

        return SlotSchedule(
            opening=self.day_window(day),
            duration_minutes=duration_minutes,
            slot_step_minutes=self.business_hours.slot_step_minutes,
            allow_overrun=self.business_hours.allow_overrun,
            blocking=self.blocking_ranges(reservations),
        )

    @staticmethod
    def active(reservations: Iterable[Reservation]) -> List[Reservation]:
        return [reservation for reservation in reservations if reservation.is_active]

    @classmethod
    def blocking_ranges(cls, reservations: Iterable[Reservation]) -> List[TimeRange]:
        """Time ranges of active reservations, sorted by start time."""
        ranges = [reservation.time_range for reservation in cls.active(reservations)]
        return sorted(ranges, key=lambda r: r.start)

    @classmethod
    def has_conflict(cls, window: TimeRange, reservations: Iterable[Reservation]) -> bool:
        """Check if any active reservation overlaps the window."""
        return any(window.overlaps(busy) for busy in cls.blocking_ranges(reservations))
