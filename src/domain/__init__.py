"""
Domain layer - Pure business logic with zero framework imports.

This package contains the intake decision pipeline: validation, spam
heuristics, per-client rate limiting and orchestration. It defines its own
port interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .exceptions import IntakeError, NotificationFailure, PersistenceFailure, RateLimitContention
from .intake import IntakeController, IntakeResult
from .models import ApplicationRecord, ApplicationSubmission, NormalizedApplication, RateLimitRecord
from .notifications import DispatchReport, NotificationDispatcher
from .ports import (
    EmailMessage,
    EmailSender,
    IntakeStatus,
    RateLimitRepository,
    SpamVerdict,
    SubmissionStore,
)
from .rate_limit import RateLimitDecision, RateLimiter, RateLimitPolicy, evaluate
from .spam import SpamHeuristics
from .validation import ValidationOutcome, validate_submission

__all__ = [
    "ApplicationRecord",
    "ApplicationSubmission",
    "DispatchReport",
    "EmailMessage",
    "EmailSender",
    "IntakeController",
    "IntakeError",
    "IntakeResult",
    "IntakeStatus",
    "NormalizedApplication",
    "NotificationDispatcher",
    "NotificationFailure",
    "PersistenceFailure",
    "RateLimitContention",
    "RateLimitDecision",
    "RateLimitPolicy",
    "RateLimitRecord",
    "RateLimitRepository",
    "RateLimiter",
    "SpamHeuristics",
    "SpamVerdict",
    "SubmissionStore",
    "ValidationOutcome",
    "evaluate",
    "validate_submission",
]
