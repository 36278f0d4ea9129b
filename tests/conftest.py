"""Shared test fixtures. No live services: stores and transports are in-memory fakes."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

# Reset vault client singleton to pick up env vars
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from core.config import SchedulerConfig
from core.event_bus import EventBus
from core.exceptions import TransportError
from core.models import ScheduledJobCreate
from core.services.memory_store import InMemoryJobStore
from core.services.view_stats_store import InMemoryViewStatsStore


# =============================================================================
# CONSTANTS
# =============================================================================

OWNER = "+56900000001"
OTHER_OWNER = "+56900000002"
CHILE_OFFSET = -240

# 2024-01-01 12:00 UTC == 2024-01-01 08:00 in Chile (UTC-4), a Monday
REFERENCE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# FAKES
# =============================================================================


class FakeTransport:
    """Records deliveries. Fails the first `failures` calls (or always)."""

    def __init__(self, failures: int = 0, always_fail: bool = False):
        self.failures = failures
        self.always_fail = always_fail
        self.calls: list[tuple[str, str]] = []
        self.sent: list[tuple[str, str]] = []

    def send(self, recipient: str, text: str) -> None:
        self.calls.append((recipient, text))
        if self.always_fail or len(self.calls) <= self.failures:
            raise TransportError("gateway unavailable")
        self.sent.append((recipient, text))


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def reference() -> datetime:
    return REFERENCE


@pytest.fixture
def config() -> SchedulerConfig:
    """Defaults, minus the real-time delays."""
    return SchedulerConfig(retry_delay_seconds=0, inter_job_delay_seconds=0)


@pytest.fixture
def store() -> InMemoryJobStore:
    return InMemoryJobStore()


@pytest.fixture
def view_stats() -> InMemoryViewStatsStore:
    return InMemoryViewStatsStore()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def published(event_bus) -> list:
    """Every event published on event_bus, in order."""
    events = []
    for name in ("JobScheduled", "JobEdited", "JobDelivered", "JobDeliveryFailed", "JobCancelled"):
        event_bus.subscribe(name, events.append)
    return events


@pytest.fixture
def make_job_data():
    """Factory for valid ScheduledJobCreate payloads."""

    def _make(
        owner_id: str = OWNER,
        scheduled_at_utc: datetime | None = None,
        content: str = "Hola",
        recipient: str = "+56912345678",
    ) -> ScheduledJobCreate:
        return ScheduledJobCreate(
            owner_id=owner_id,
            recipient=recipient,
            original_recipient_text=recipient,
            content=content,
            scheduled_at_utc=scheduled_at_utc or REFERENCE + timedelta(hours=1),
            original_datetime_text="test",
            issuer_utc_offset_minutes=CHILE_OFFSET,
        )

    return _make


@pytest.fixture
def make_transport():
    """Factory for FakeTransport with configurable failures."""
    return FakeTransport


@pytest.fixture
def owner() -> str:
    return OWNER


@pytest.fixture
def other_owner() -> str:
    return OTHER_OWNER
