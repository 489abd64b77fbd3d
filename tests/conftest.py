"""Global test fixtures and utilities for extflex tests"""
import pytest
from datetime import datetime, timedelta, timezone

from extflex import config
from extflex.services.container import ServiceContainer
from extflex.storage.memory_store import InMemoryStore


# ============================================================================
# Clock Fixtures
# ============================================================================

class FakeClock:
    """Settable clock; call it to get the current aware datetime"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0, minutes: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours, minutes=minutes)

    def set(self, now: datetime) -> None:
        self.now = now


@pytest.fixture(autouse=True)
def utc_day_keys(monkeypatch):
    """Compute day keys in UTC so tests don't depend on the host timezone"""
    monkeypatch.setattr(config, "TIMEZONE", "UTC")


@pytest.fixture
def clock():
    """Clock fixed at Wednesday 2024-03-13 12:00 UTC"""
    return FakeClock(datetime(2024, 3, 13, 12, 0, tzinfo=timezone.utc))


# ============================================================================
# Store & Service Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Empty in-memory store"""
    return InMemoryStore()


@pytest.fixture
def container(store, clock):
    """Service container over the in-memory store and fake clock"""
    return ServiceContainer(store=store, clock=clock)


@pytest.fixture
def progression_service(container):
    return container.progression_service


@pytest.fixture
def streak_service(container):
    return container.streak_service


@pytest.fixture
def personal_best_service(container):
    return container.personal_best_service


@pytest.fixture
def exercise_log_service(container):
    return container.exercise_log_service


@pytest.fixture
def data_transfer_service(container):
    return container.data_transfer_service
