"""
FastAPI dependencies - Wiring and dependency injection factories.

The intake controller and its collaborators are built once at startup
(see main.lifespan) and stored in app.state; routes receive them via
Depends() factories so tests can override or replace them.
"""

from datetime import timedelta

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.mail.console import ConsoleEmailSender
from src.adapters.mail.resend import ResendEmailSender
from src.adapters.repository.postgres import (
    PostgresRateLimitRepository,
    PostgresSubmissionStore,
)
from src.config.settings import Settings
from src.domain.intake import IntakeController
from src.domain.notifications import NotificationDispatcher
from src.domain.ports import EmailSender, RateLimitRepository, SubmissionStore
from src.domain.rate_limit import RateLimiter, RateLimitPolicy
from src.domain.spam import SpamHeuristics


def build_email_sender(settings: Settings) -> EmailSender:
    """Resend when an API key is configured, console logging otherwise."""
    if settings.resend_api_key:
        return ResendEmailSender(
            api_key=settings.resend_api_key,
            base_url=settings.resend_base_url,
            timeout=settings.notification_timeout_seconds,
        )
    return ConsoleEmailSender()


def build_intake_controller(
    settings: Settings,
    store: SubmissionStore,
    rate_limits: RateLimitRepository,
    email_sender: EmailSender,
) -> IntakeController:
    """Assemble the intake pipeline from settings and infrastructure adapters."""
    policy = RateLimitPolicy(
        max_submissions=settings.rate_limit_max_submissions,
        window=settings.rate_limit_window,
        block_duration=settings.rate_limit_block_duration,
    )
    return IntakeController(
        store=store,
        rate_limiter=RateLimiter(
            rate_limits,
            policy=policy,
            max_attempts=max(settings.rate_limit_max_attempts, policy.min_write_attempts),
        ),
        dispatcher=NotificationDispatcher(
            sender=email_sender,
            from_address=settings.notification_from,
            operator_address=settings.operator_email,
        ),
        spam=SpamHeuristics(min_fill_time=timedelta(seconds=settings.min_fill_seconds)),
    )


def build_postgres_intake_controller(
    settings: Settings,
    pool: ConnectionPool,
    email_sender: EmailSender,
) -> IntakeController:
    return build_intake_controller(
        settings,
        store=PostgresSubmissionStore(pool),
        rate_limits=PostgresRateLimitRepository(pool),
        email_sender=email_sender,
    )


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_intake_controller(request: Request) -> IntakeController:
    """Get the intake controller built at startup."""
    return request.app.state.intake_controller


def get_client_key(request: Request) -> str:
    """
    Identify the client for rate limiting.

    First hop of X-Forwarded-For (set by the edge proxy), then X-Real-IP,
    then the socket peer address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"
