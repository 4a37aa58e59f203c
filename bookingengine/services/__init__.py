"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_checker import (
    AvailabilityChecker,
    EmployeeDirectoryProtocol,
    ReservationLookupProtocol,
)
from .booking_planner import BookingPlanner, BookingQuote
from .occupancy_service import OccupancyReport, OccupancyService, OccupancyStats
from .pricing_service import (
    ConfigSaveResult,
    PricePreviewResult,
    PricingConfigStoreProtocol,
    PricingService,
)

__all__ = [
    "AvailabilityChecker",
    "BookingPlanner",
    "BookingQuote",
    "ConfigSaveResult",
    "EmployeeDirectoryProtocol",
    "OccupancyReport",
    "OccupancyService",
    "OccupancyStats",
    "PricePreviewResult",
    "PricingConfigStoreProtocol",
    "PricingService",
    "ReservationLookupProtocol",
]
