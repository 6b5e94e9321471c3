"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the intake pipeline requires
from infrastructure, plus the tagged result enums shared across the domain.
Adapters implement these protocols structurally.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .models import ApplicationRecord, RateLimitRecord


class IntakeStatus(str, Enum):
    """
    Outcome of a single intake invocation.

    - ACCEPTED: record persisted (or idempotent replay of a persisted record)
    - REJECTED: validation or spam heuristic failed, nothing persisted
    - RATE_LIMITED: client key blocked, nothing persisted
    - INTERNAL_ERROR: infrastructure failure (store unavailable, contention)
    """

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    RATE_LIMITED = "rate_limited"
    INTERNAL_ERROR = "internal_error"


class SpamVerdict(Enum):
    """Result of the anti-abuse heuristics, evaluated in declaration order."""

    CLEAN = "clean"
    HONEYPOT = "honeypot"
    TOO_FAST = "too_fast"
    SUSPICIOUS_CONTENT = "suspicious_content"


@dataclass(frozen=True)
class EmailMessage:
    """Outbound email, transport-agnostic."""

    sender: str
    to: tuple[str, ...]
    subject: str
    html: str
    reply_to: str | None = None


class SubmissionStore(Protocol):
    """Port interface for application persistence."""

    def insert(self, record: ApplicationRecord) -> bool:
        """
        Durably store an application record.

        Returns:
            True if the record was stored, False if a record with the same
            request_id already exists (nothing written)

        Raises:
            PersistenceFailure: store unavailable or write rejected
        """
        ...

    def find_by_request_id(self, request_id: str) -> ApplicationRecord | None:
        """
        Look up a previously stored record by its idempotency key.

        Raises:
            PersistenceFailure: store unavailable
        """
        ...


class RateLimitRepository(Protocol):
    """
    Port interface for per-client rate-limit state.

    Writes are conditional so that concurrent invocations, possibly in
    different processes, serialize per client key without an in-process lock.
    """

    def get(self, client_key: str) -> RateLimitRecord | None:
        """Return the current record for a client key, or None if it has never been seen."""
        ...

    def create(self, record: RateLimitRecord) -> bool:
        """
        Insert the first record for a client key.

        Returns:
            True if inserted, False if a record for that key already exists
        """
        ...

    def compare_and_set(self, record: RateLimitRecord, expected_version: int) -> bool:
        """
        Replace the stored record only if its version still equals expected_version.

        Returns:
            True if the update was applied, False if another writer got there first
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send(self, message: EmailMessage) -> None:
        """
        Deliver a single message.

        Raises:
            NotificationFailure: transport rejected or failed to deliver
        """
        ...
