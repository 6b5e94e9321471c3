"""
Shared fixtures for adversarial tests.

Provides a repository wrapper that forces every caller to read the same
state before anyone is allowed to write it.
"""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from src.domain.models import RateLimitRecord
from src.domain.ports import RateLimitRepository

T = TypeVar("T")


class LockstepRepository:
    """
    RateLimitRepository that holds each thread's first read at a barrier.

    All threads observe the same initial record, so every write after the
    barrier is a genuine race on the conditional write path.
    """

    def __init__(self, inner: RateLimitRepository, parties: int) -> None:
        self._inner = inner
        self._barrier = threading.Barrier(parties)
        self._local = threading.local()

    def get(self, client_key: str) -> RateLimitRecord | None:
        record = self._inner.get(client_key)
        if not getattr(self._local, "released", False):
            self._local.released = True
            self._barrier.wait(timeout=10)
        return record

    def create(self, record: RateLimitRecord) -> bool:
        return self._inner.create(record)

    def compare_and_set(self, record: RateLimitRecord, expected_version: int) -> bool:
        return self._inner.compare_and_set(record, expected_version)


def run_concurrently(fn: Callable[[], T], count: int) -> list[T]:
    """Run fn on count threads at once and collect the results."""
    with ThreadPoolExecutor(max_workers=count) as executor:
        futures = [executor.submit(fn) for _ in range(count)]
        return [f.result() for f in futures]
