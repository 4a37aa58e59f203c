"""
Load reservations and employees from a JSON fixture file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

import pendulum

from ..domain.exceptions import BookingError
from ..domain.models import DEFAULT_TIMEZONE, Employee, Reservation
from .in_memory import InMemoryEmployeeDirectory, InMemoryReservationStore

logger = logging.getLogger(__name__)

SAMPLE_DATA_FILE = Path(__file__).parent / "sample_data.json"


@dataclass
class Fixture:
    reservations: InMemoryReservationStore
    employees: InMemoryEmployeeDirectory


def load_fixture(path: Optional[Path] = None, timezone: str = DEFAULT_TIMEZONE) -> Fixture:
    """
    Build in-memory stores from a JSON document.

    Expected format:
    {
        "employees": [
            {"id": "...", "first_name": "...", "last_name": "...",
             "employee_type": "physiotherapist"}
        ],
        "assignments": [
            {"employee_id": "...", "location_id": "...", "hourly_rate": 180}
        ],
        "reservations": [
            {"id": "...", "room_id": "...", "employee_id": "...",
             "start": "2024-01-10T10:00", "end": "2024-01-10T11:00",
             "service_type": "physiotherapy", "status": "confirmed",
             "final_price": 120, "is_dead_hour": true, "client_name": "..."}
        ]
    }

    Times without an offset are read in ``timezone``. Malformed entries are
    skipped with a warning.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid JSON or not a mapping
    """
    data_file = path or SAMPLE_DATA_FILE

    if not data_file.exists():
        raise FileNotFoundError(f"Fixture file not found: {data_file}")

    try:
        with open(data_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {data_file}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Fixture file must contain a mapping at the root level.")

    directory = InMemoryEmployeeDirectory()
    for entry in data.get("employees", []):
        try:
            directory.add_employee(
                Employee(
                    id=str(entry["id"]),
                    first_name=entry.get("first_name", ""),
                    last_name=entry.get("last_name", ""),
                    employee_type=entry["employee_type"],
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping employee entry %r: %s", entry, e)

    for entry in data.get("assignments", []):
        try:
            directory.assign(
                str(entry["employee_id"]),
                str(entry["location_id"]),
                _parse_money(entry.get("hourly_rate")),
            )
        except (KeyError, TypeError, InvalidOperation) as e:
            logger.warning("Skipping assignment entry %r: %s", entry, e)

    store = InMemoryReservationStore()
    for entry in data.get("reservations", []):
        try:
            store.add(_parse_reservation(entry, timezone))
        except (KeyError, TypeError, ValueError, InvalidOperation, BookingError) as e:
            logger.warning("Skipping reservation entry %r: %s", entry, e)

    logger.debug(
        "Loaded %d employees and %d reservations from %s",
        len(directory.all()),
        len(store.all()),
        data_file,
    )
    return Fixture(reservations=store, employees=directory)


def _parse_reservation(entry: Dict[str, Any], timezone: str) -> Reservation:
    return Reservation(
        id=str(entry["id"]),
        room_id=str(entry["room_id"]),
        employee_id=str(entry["employee_id"]),
        start_time=pendulum.parse(entry["start"], tz=timezone),
        end_time=pendulum.parse(entry["end"], tz=timezone),
        service_type=entry.get("service_type", "other"),
        status=entry.get("status", "confirmed"),
        final_price=_parse_money(entry.get("final_price")),
        is_dead_hour=bool(entry.get("is_dead_hour", False)),
        client_name=entry.get("client_name", ""),
    )


def _parse_money(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))
