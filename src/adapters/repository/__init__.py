"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryRateLimitRepository, InMemorySubmissionStore
from .postgres import PostgresRateLimitRepository, PostgresSubmissionStore, run_migrations

__all__ = [
    "InMemoryRateLimitRepository",
    "InMemorySubmissionStore",
    "PostgresRateLimitRepository",
    "PostgresSubmissionStore",
    "run_migrations",
]
