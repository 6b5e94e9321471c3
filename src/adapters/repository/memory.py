"""
In-memory repository adapters - Process-local SubmissionStore and RateLimitRepository.

For local runs without PostgreSQL and for tests. The lock only makes each
single call atomic, mirroring one SQL statement; it does not serialize the
read-evaluate-write sequence, which still relies on compare_and_set.
"""

import threading

from src.domain.models import ApplicationRecord, RateLimitRecord


class InMemorySubmissionStore:
    """Implements SubmissionStore protocol with a list of records."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[ApplicationRecord] = []

    @property
    def records(self) -> list[ApplicationRecord]:
        with self._lock:
            return list(self._records)

    def insert(self, record: ApplicationRecord) -> bool:
        with self._lock:
            if record.request_id is not None and any(
                r.request_id == record.request_id for r in self._records
            ):
                return False
            self._records.append(record)
            return True

    def find_by_request_id(self, request_id: str) -> ApplicationRecord | None:
        with self._lock:
            return next((r for r in self._records if r.request_id == request_id), None)


class InMemoryRateLimitRepository:
    """Implements RateLimitRepository protocol with a dict keyed by client key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, RateLimitRecord] = {}

    def get(self, client_key: str) -> RateLimitRecord | None:
        with self._lock:
            return self._records.get(client_key)

    def create(self, record: RateLimitRecord) -> bool:
        with self._lock:
            if record.client_key in self._records:
                return False
            self._records[record.client_key] = record
            return True

    def compare_and_set(self, record: RateLimitRecord, expected_version: int) -> bool:
        with self._lock:
            current = self._records.get(record.client_key)
            if current is None or current.version != expected_version:
                return False
            self._records[record.client_key] = record
            return True
