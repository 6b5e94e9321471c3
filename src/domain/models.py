"""
Domain models - Submission, application and rate-limit records.

Plain dataclasses, no framework types. Persisted records are frozen so a
stored value can never be mutated behind a repository's back.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class ApplicationSubmission:
    """Raw application as received from the public form (never persisted as-is)."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    destination_country: str | None = None
    profession: str | None = None
    message: str | None = None
    honeypot: str | None = None
    form_rendered_at: datetime | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class NormalizedApplication:
    """Validated application fields in canonical form."""

    name: str
    email: str
    phone: str
    destination_country: str
    profession: str
    message: str


@dataclass(frozen=True)
class ApplicationRecord:
    """Accepted application, created once and immutable thereafter."""

    id: UUID
    name: str
    email: str
    phone: str
    destination_country: str
    profession: str
    message: str
    created_at: datetime
    request_id: str | None = None

    @classmethod
    def from_application(
        cls,
        application: NormalizedApplication,
        *,
        id: UUID,
        created_at: datetime,
        request_id: str | None = None,
    ) -> "ApplicationRecord":
        return cls(
            id=id,
            name=application.name,
            email=application.email,
            phone=application.phone,
            destination_country=application.destination_country,
            profession=application.profession,
            message=application.message,
            created_at=created_at,
            request_id=request_id,
        )


@dataclass(frozen=True)
class RateLimitRecord:
    """
    Per-client admission counter.

    `version` increases by one on every write and is the compare-and-set
    token for conditional updates.
    """

    client_key: str
    submission_count: int
    window_started_at: datetime
    last_submission_at: datetime
    blocked_until: datetime | None = None
    version: int = 0

    def is_blocked_at(self, now: datetime) -> bool:
        return self.blocked_until is not None and now < self.blocked_until

    def next_version(self, **changes) -> "RateLimitRecord":
        return replace(self, version=self.version + 1, **changes)
