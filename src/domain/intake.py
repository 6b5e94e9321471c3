"""
Intake controller - Orchestrates one application submission end to end.

Pipeline (fail fast, first failure wins):

    SpamHeuristics -> Validator -> [idempotent replay lookup]
        -> RateLimiter -> SubmissionStore -> NotificationDispatcher

Rejections before the store step persist nothing and touch no counter
beyond what the rate limiter itself defines. A store failure after
admission is an INTERNAL_ERROR and the admission still counts against the
client's quota. Notifications never influence the outcome.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from .exceptions import PersistenceFailure
from .models import ApplicationRecord, ApplicationSubmission
from .notifications import NotificationDispatcher
from .ports import IntakeStatus, SpamVerdict, SubmissionStore
from .rate_limit import RateLimiter
from .spam import SpamHeuristics
from .validation import validate_submission

logger = logging.getLogger(__name__)

ACCEPTED_MESSAGE = "Candidature soumise avec succès"
SPAM_MESSAGE = "Soumission invalide"
RATE_LIMITED_MESSAGE = "Trop de tentatives. Veuillez réessayer plus tard."
INTERNAL_ERROR_MESSAGE = "Une erreur est survenue. Veuillez réessayer plus tard."

# schedule(fn, *args) runs fn later, e.g. FastAPI's BackgroundTasks.add_task
Scheduler = Callable[..., None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of IntakeController.submit()."""

    status: IntakeStatus
    message: str
    record: ApplicationRecord | None = None
    retry_after: datetime | None = None
    replayed: bool = False

    def retry_after_seconds(self, now: datetime) -> int | None:
        if self.retry_after is None:
            return None
        remaining = self.retry_after - now
        return max(0, int(remaining / timedelta(seconds=1)))


@dataclass
class IntakeController:
    """
    Domain service for application intake.

    All collaborators are injected at construction; nothing is read from
    module-level state.
    """

    store: SubmissionStore
    rate_limiter: RateLimiter
    dispatcher: NotificationDispatcher
    spam: SpamHeuristics = field(default_factory=SpamHeuristics)
    clock: Callable[[], datetime] = utc_now

    def submit(
        self,
        submission: ApplicationSubmission,
        client_key: str,
        schedule: Scheduler | None = None,
    ) -> IntakeResult:
        """
        Evaluate one submission from client_key.

        Args:
            submission: Raw application fields and anti-bot signals
            client_key: Rate-limit scope (client IP)
            schedule: Optional deferral hook for notifications; when omitted
                they are sent inline before returning

        Returns:
            IntakeResult with ACCEPTED, REJECTED, RATE_LIMITED or INTERNAL_ERROR
        """
        now = self.clock()

        verdict = self.spam.check(submission, now)
        if verdict is not SpamVerdict.CLEAN:
            logger.warning("Spam heuristic %s triggered for client %s", verdict.value, client_key)
            return IntakeResult(status=IntakeStatus.REJECTED, message=SPAM_MESSAGE)

        outcome = validate_submission(submission)
        if not outcome.ok:
            return IntakeResult(status=IntakeStatus.REJECTED, message=outcome.error)

        try:
            if submission.request_id:
                existing = self.store.find_by_request_id(submission.request_id)
                if existing is not None:
                    logger.info(
                        "Replayed request %s maps to application %s",
                        submission.request_id,
                        existing.id,
                    )
                    return self._accepted(existing, replayed=True)

            decision = self.rate_limiter.check(client_key, now)
            if not decision.admitted:
                logger.info("Client %s rate limited until %s", client_key, decision.retry_after)
                return IntakeResult(
                    status=IntakeStatus.RATE_LIMITED,
                    message=RATE_LIMITED_MESSAGE,
                    retry_after=decision.retry_after,
                )

            record = ApplicationRecord.from_application(
                outcome.application,
                id=uuid4(),
                created_at=now,
                request_id=submission.request_id,
            )
            created = self.store.insert(record)
            if not created:
                # Concurrent duplicate of the same request id; the winner notifies.
                stored = self.store.find_by_request_id(submission.request_id)
                if stored is None:
                    raise PersistenceFailure(
                        f"Request {submission.request_id} reported as duplicate but not found"
                    )
        except PersistenceFailure:
            logger.exception("Persistence failure while handling submission from %s", client_key)
            return IntakeResult(status=IntakeStatus.INTERNAL_ERROR, message=INTERNAL_ERROR_MESSAGE)

        if not created:
            logger.info("Request %s already stored by a concurrent call", submission.request_id)
            return self._accepted(stored, replayed=True)

        logger.info("Application %s stored for client %s", record.id, client_key)

        if schedule is None:
            self.dispatcher.dispatch(record)
        else:
            schedule(self.dispatcher.dispatch, record)

        return self._accepted(record)

    def _accepted(self, record: ApplicationRecord, replayed: bool = False) -> IntakeResult:
        return IntakeResult(
            status=IntakeStatus.ACCEPTED,
            message=ACCEPTED_MESSAGE,
            record=record,
            replayed=replayed,
        )
