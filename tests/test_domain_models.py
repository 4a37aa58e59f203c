"""
Tests for domain models.
"""

import pendulum
import pytest

from bookingengine.domain.exceptions import InvalidTimeRange, UnknownServiceType
from bookingengine.domain.models import (
    Employee,
    EmployeeType,
    Reservation,
    ReservationStatus,
    ServiceType,
    TimeRange,
    localize,
)

TZ = "Europe/Warsaw"


def _at(value: str):
    return pendulum.parse(value, tz=TZ)


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = _at("2024-01-10 08:00")
        end = _at("2024-01-10 20:00")

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 720

    def test_invalid_time_range_raises_error(self):
        """End before start is rejected with a ValueError subclass."""
        with pytest.raises(InvalidTimeRange, match="Start time .* must be before end time"):
            TimeRange(start=_at("2024-01-10 11:00"), end=_at("2024-01-10 10:00"))

    def test_empty_time_range_raises_error(self):
        """A zero-length window is not a valid range."""
        with pytest.raises(ValueError):
            TimeRange(start=_at("2024-01-10 10:00"), end=_at("2024-01-10 10:00"))

    def test_overlap_is_symmetric(self):
        """overlaps(a, b) == overlaps(b, a) for every pairing."""
        ranges = [
            TimeRange(start=_at("2024-01-10 09:00"), end=_at("2024-01-10 12:00")),
            TimeRange(start=_at("2024-01-10 11:00"), end=_at("2024-01-10 14:00")),
            TimeRange(start=_at("2024-01-10 12:00"), end=_at("2024-01-10 13:00")),
            TimeRange(start=_at("2024-01-10 10:00"), end=_at("2024-01-10 10:30")),
            TimeRange(start=_at("2024-01-10 15:00"), end=_at("2024-01-10 17:00")),
        ]

        for a in ranges:
            for b in ranges:
                assert a.overlaps(b) == b.overlaps(a)

    def test_touching_boundaries_do_not_overlap(self):
        """[t0, t1) and [t1, t2) share no instant."""
        first = TimeRange(start=_at("2024-01-10 10:00"), end=_at("2024-01-10 11:00"))
        second = TimeRange(start=_at("2024-01-10 11:00"), end=_at("2024-01-10 12:00"))

        assert not first.overlaps(second)
        assert not second.overlaps(first)

    def test_containment_overlaps(self):
        """A window fully inside another overlaps it."""
        outer = TimeRange(start=_at("2024-01-10 09:00"), end=_at("2024-01-10 17:00"))
        inner = TimeRange(start=_at("2024-01-10 12:00"), end=_at("2024-01-10 12:30"))

        assert outer.overlaps(inner)
        assert inner.overlaps(outer)

    def test_intersect(self):
        """Test intersection calculation."""
        tr1 = TimeRange(start=_at("2024-01-10 09:00"), end=_at("2024-01-10 12:00"))
        tr2 = TimeRange(start=_at("2024-01-10 11:00"), end=_at("2024-01-10 14:00"))

        intersection = tr1.intersect(tr2)

        assert intersection is not None
        assert intersection.start == _at("2024-01-10 11:00")
        assert intersection.end == _at("2024-01-10 12:00")

    def test_intersect_no_overlap(self):
        """Test intersection with no overlap returns None."""
        tr1 = TimeRange(start=_at("2024-01-10 09:00"), end=_at("2024-01-10 11:00"))
        tr2 = TimeRange(start=_at("2024-01-10 11:00"), end=_at("2024-01-10 14:00"))

        assert tr1.intersect(tr2) is None


class TestServiceType:
    """Tests for service type parsing."""

    def test_parse_known_values(self):
        assert ServiceType.parse("physiotherapy") is ServiceType.PHYSIOTHERAPY
        assert ServiceType.parse(" Personal_Training ") is ServiceType.PERSONAL_TRAINING
        assert ServiceType.parse(ServiceType.OTHER) is ServiceType.OTHER

    def test_parse_unknown_value_raises(self):
        with pytest.raises(UnknownServiceType) as exc_info:
            ServiceType.parse("yoga")

        assert exc_info.value.value == "yoga"


class TestEmployee:
    """Tests for employee/service compatibility."""

    def test_physiotherapy_needs_physiotherapist(self):
        physio = Employee("e1", "Anna", "Nowak", "physiotherapist")
        trainer = Employee("e2", "Piotr", "Kowalski", "personal_trainer")

        assert physio.can_serve("physiotherapy")
        assert not trainer.can_serve("physiotherapy")

    def test_personal_training_needs_trainer(self):
        physio = Employee("e1", "Anna", "Nowak", "physiotherapist")
        trainer = Employee("e2", "Piotr", "Kowalski", "personal_trainer")

        assert trainer.can_serve(ServiceType.PERSONAL_TRAINING)
        assert not physio.can_serve(ServiceType.PERSONAL_TRAINING)

    def test_anyone_can_serve_other(self):
        assert Employee("e1", "Anna", "Nowak", "physiotherapist").can_serve("other")
        assert Employee("e2", "Piotr", "Kowalski", "personal_trainer").can_serve("other")

    def test_type_is_parsed(self):
        employee = Employee("e1", "Anna", "Nowak", "physiotherapist")

        assert employee.employee_type is EmployeeType.PHYSIOTHERAPIST

    @pytest.mark.parametrize("employee_type", ["physio", "receptionist", ""])
    def test_unknown_type_is_rejected(self, employee_type):
        with pytest.raises(ValueError):
            Employee("e1", "Anna", "Nowak", employee_type)

    def test_full_name(self):
        assert Employee("e1", "Anna", "Nowak", "physiotherapist").full_name() == "Anna Nowak"


class TestReservation:
    """Tests for Reservation model."""

    def test_cancelled_reservation_is_inactive(self):
        reservation = Reservation(
            id="r1",
            room_id="room-1",
            employee_id="e1",
            start_time=_at("2024-01-10 10:00"),
            end_time=_at("2024-01-10 11:00"),
            status="cancelled",
        )

        assert reservation.status is ReservationStatus.CANCELLED
        assert not reservation.is_active

    def test_completed_reservation_still_blocks(self):
        reservation = Reservation(
            id="r1",
            room_id="room-1",
            employee_id="e1",
            start_time=_at("2024-01-10 10:00"),
            end_time=_at("2024-01-10 11:00"),
            status=ReservationStatus.COMPLETED,
        )

        assert reservation.is_active

    def test_reservation_requires_ordered_times(self):
        with pytest.raises(InvalidTimeRange):
            Reservation(
                id="r1",
                room_id="room-1",
                employee_id="e1",
                start_time=_at("2024-01-10 11:00"),
                end_time=_at("2024-01-10 10:00"),
            )

    def test_service_type_string_is_normalised(self):
        reservation = Reservation(
            id="r1",
            room_id="room-1",
            employee_id="e1",
            start_time=_at("2024-01-10 10:00"),
            end_time=_at("2024-01-10 11:00"),
            service_type="physiotherapy",
        )

        assert reservation.service_type is ServiceType.PHYSIOTHERAPY


class TestLocalize:
    """Tests for converting times to the business zone."""

    def test_naive_time_is_read_as_local(self):
        from datetime import datetime

        local = localize(datetime(2024, 1, 10, 10, 0), TZ)

        assert local.hour == 10
        assert local.timezone_name == TZ

    def test_aware_time_is_converted(self):
        utc = pendulum.datetime(2024, 1, 10, 9, 0, tz="UTC")

        local = localize(utc, TZ)

        # Warsaw is UTC+1 in January
        assert local.hour == 10
        assert local == utc
