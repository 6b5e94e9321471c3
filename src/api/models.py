"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field constraints on the application itself are deliberately absent here:
the domain validator owns them so that every rejection yields one
deterministic message.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from src.domain.models import ApplicationSubmission


class ApplicationRequest(BaseModel):
    """Request model for an application submission."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    country: str | None = Field(default=None, description="Destination country")
    profession: str | None = None
    message: str | None = None
    honeypot: str | None = Field(default=None, description="Must be left empty")
    timestamp: float | None = Field(
        default=None,
        ge=0,
        le=1e14,
        description="Form render time in milliseconds since the Unix epoch",
    )
    request_id: str | None = Field(
        default=None,
        alias="requestId",
        max_length=128,
        description="Client-generated idempotency key",
    )

    def to_submission(self, request_id: str | None = None) -> ApplicationSubmission:
        """Convert to the domain input, preferring an explicit idempotency key."""
        rendered_at = None
        if self.timestamp is not None:
            rendered_at = datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)
        return ApplicationSubmission(
            name=self.name,
            email=self.email,
            phone=self.phone,
            destination_country=self.country,
            profession=self.profession,
            message=self.message,
            honeypot=self.honeypot,
            form_rendered_at=rendered_at,
            request_id=request_id or self.request_id,
        )


class SubmitResponse(BaseModel):
    """Response model for an accepted application."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str


class RateLimitedResponse(BaseModel):
    """Error response for a blocked client."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    retry_after: str = Field(alias="retryAfter", description="ISO-8601 timestamp")
