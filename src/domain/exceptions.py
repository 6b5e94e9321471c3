"""
Domain exceptions - Infrastructure failures surfaced to the intake pipeline.

Expected rejections (validation, spam, rate limiting) are returned as tagged
results. Exceptions are reserved for failures that can't be attributed to
the caller.
"""


class IntakeError(Exception):
    """Base class for intake domain errors."""

    pass


class PersistenceFailure(IntakeError):
    """Store unavailable, timed out, or write rejected."""

    pass


class RateLimitContention(PersistenceFailure):
    """Conditional update on a rate-limit record kept losing to concurrent writers."""

    def __init__(self, client_key: str, attempts: int) -> None:
        super().__init__(f"Rate limit update for {client_key!r} failed after {attempts} attempts")
        self.client_key = client_key
        self.attempts = attempts


class NotificationFailure(IntakeError):
    """Outbound email transport rejected or failed to deliver a message."""

    pass
