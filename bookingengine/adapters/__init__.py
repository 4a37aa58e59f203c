"""
Adapters layer - Collaborator implementations (in-memory stores, JSON fixtures).
"""

from .fixture_loader import SAMPLE_DATA_FILE, Fixture, load_fixture
from .in_memory import InMemoryEmployeeDirectory, InMemoryPricingConfigStore, InMemoryReservationStore

__all__ = [
    "Fixture",
    "InMemoryEmployeeDirectory",
    "InMemoryPricingConfigStore",
    "InMemoryReservationStore",
    "SAMPLE_DATA_FILE",
    "load_fixture",
]
