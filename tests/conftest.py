"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock
- Valid submissions
- An intake controller wired to in-memory adapters and a mock email sender
- A PostgreSQL pool for integration and adversarial tests
"""

from collections.abc import Generator
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.memory import InMemoryRateLimitRepository, InMemorySubmissionStore
from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings
from src.domain.intake import IntakeController
from src.domain.models import ApplicationSubmission
from src.domain.notifications import NotificationDispatcher
from src.domain.rate_limit import RateLimiter, RateLimitPolicy

START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def valid_submission(**overrides) -> ApplicationSubmission:
    """A submission that passes every heuristic and validation rule."""
    submission = ApplicationSubmission(
        name="Jean Dupont",
        email="jean.dupont@example.com",
        phone="+33 6 12 34 56 78",
        destination_country="France",
        profession="Infirmier",
        message="Je souhaite travailler en France dès l'année prochaine.",
        honeypot="",
        form_rendered_at=None,
    )
    return replace(submission, **overrides)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemorySubmissionStore:
    return InMemorySubmissionStore()


@pytest.fixture
def rate_limits() -> InMemoryRateLimitRepository:
    return InMemoryRateLimitRepository()


@pytest.fixture
def email_sender() -> Mock:
    return Mock()


@pytest.fixture
def controller(
    store: InMemorySubmissionStore,
    rate_limits: InMemoryRateLimitRepository,
    email_sender: Mock,
    clock: FakeClock,
) -> IntakeController:
    """Intake controller with in-memory stores and default policy."""
    return IntakeController(
        store=store,
        rate_limiter=RateLimiter(rate_limits, policy=RateLimitPolicy()),
        dispatcher=NotificationDispatcher(
            sender=email_sender,
            from_address="ProVisa <contact@provisa.fr>",
            operator_address="ops@provisa.fr",
        ),
        clock=clock,
    )


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool against DATABASE_URL with migrations applied.

    Tests depending on it are skipped when PostgreSQL is not reachable.
    """
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=True)
    try:
        pool.wait(timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL not reachable")

    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty both tables before each test."""
    with pool.connection() as conn:
        conn.execute("TRUNCATE applications, application_rate_limits")
        conn.commit()
    yield
