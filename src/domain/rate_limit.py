"""
Per-client rate limiting - Admission state machine with optimistic writes.

Rate Limit State Machine
========================

States per client key:
- FRESH: no record stored yet
- ACTIVE: record exists, not blocked
- BLOCKED: blocked_until is in the future

Transitions on an admission attempt at time t:
    FRESH   -> ACTIVE   create record (count=1, window=t). Admit.
    ACTIVE  -> ACTIVE   t - last >= window: reset (count=1, window=t). Admit.
    ACTIVE  -> ACTIVE   t - last < window, count+1 <= threshold: count+=1. Admit.
    ACTIVE  -> BLOCKED  t - last < window, count+1 > threshold: count+=1,
                        blocked_until = t + block. Reject.
    BLOCKED -> BLOCKED  t < blocked_until: reject, record untouched.
    BLOCKED -> ACTIVE   t >= blocked_until: reset as above. Admit.

Atomicity
=========

`evaluate()` is pure. `RateLimiter.check()` reads the record, evaluates, and
writes the result back with a conditional write keyed on the record version
(insert-if-absent for FRESH). A lost race means another invocation changed
the record first; the attempt is re-read and re-evaluated, so the decisions
for one key behave as if all attempts had been serialized.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from .exceptions import RateLimitContention
from .models import RateLimitRecord
from .ports import RateLimitRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Admission thresholds. Block duration should exceed the window."""

    max_submissions: int = 3
    window: timedelta = timedelta(hours=1)
    block_duration: timedelta = timedelta(hours=2)

    @property
    def min_write_attempts(self) -> int:
        """
        Conditional writes one check must be allowed to try.

        Within a window at most max_submissions + 1 competing attempts can
        change the record before the key is blocked, and every later attempt
        is decided without a write.
        """
        return self.max_submissions + 2


@dataclass(frozen=True)
class RateLimitDecision:
    """
    Result of evaluating one admission attempt.

    `record` is the state to persist; when `changed` is False the stored
    record is already correct and no write is needed.
    """

    admitted: bool
    record: RateLimitRecord
    changed: bool = True
    retry_after: datetime | None = None


def evaluate(
    record: RateLimitRecord | None,
    client_key: str,
    now: datetime,
    policy: RateLimitPolicy,
) -> RateLimitDecision:
    """Apply one admission attempt to the current state of a client key."""
    if record is None:
        fresh = RateLimitRecord(
            client_key=client_key,
            submission_count=1,
            window_started_at=now,
            last_submission_at=now,
        )
        return RateLimitDecision(admitted=True, record=fresh)

    if record.is_blocked_at(now):
        return RateLimitDecision(
            admitted=False,
            record=record,
            changed=False,
            retry_after=record.blocked_until,
        )

    block_expired = record.blocked_until is not None
    if block_expired or now - record.last_submission_at >= policy.window:
        reset = record.next_version(
            submission_count=1,
            window_started_at=now,
            last_submission_at=now,
            blocked_until=None,
        )
        return RateLimitDecision(admitted=True, record=reset)

    count = record.submission_count + 1
    if count > policy.max_submissions:
        blocked_until = now + policy.block_duration
        blocked = record.next_version(
            submission_count=count,
            last_submission_at=now,
            blocked_until=blocked_until,
        )
        return RateLimitDecision(admitted=False, record=blocked, retry_after=blocked_until)

    counted = record.next_version(submission_count=count, last_submission_at=now)
    return RateLimitDecision(admitted=True, record=counted)


class RateLimiter:
    """
    Admission gate keyed by client origin.

    Uses structural subtyping for the repository - any object with
    get/create/compare_and_set works.
    """

    def __init__(
        self,
        repository: RateLimitRepository,
        policy: RateLimitPolicy | None = None,
        max_attempts: int = 10,
    ) -> None:
        self._repository = repository
        self.policy = policy or RateLimitPolicy()
        self.max_attempts = max_attempts

    def check(self, client_key: str, now: datetime) -> RateLimitDecision:
        """
        Decide whether an attempt from client_key at time now is admitted.

        Raises:
            RateLimitContention: every conditional write lost to a concurrent writer
            PersistenceFailure: repository unavailable
        """
        for attempt in range(1, self.max_attempts + 1):
            current = self._repository.get(client_key)
            decision = evaluate(current, client_key, now, self.policy)

            if not decision.changed:
                return decision

            if current is None:
                written = self._repository.create(decision.record)
            else:
                written = self._repository.compare_and_set(
                    decision.record, expected_version=current.version
                )

            if written:
                if decision.retry_after is not None:
                    logger.warning(
                        "Client %s blocked until %s after %d submissions",
                        client_key,
                        decision.retry_after.isoformat(),
                        decision.record.submission_count,
                    )
                return decision

            logger.debug("Rate limit write conflict for %s (attempt %d)", client_key, attempt)

        raise RateLimitContention(client_key, self.max_attempts)
