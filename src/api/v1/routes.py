"""
API v1 routes.

Defines the public application intake endpoint.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Response, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_client_key, get_intake_controller
from src.api.models import (
    ApplicationRequest,
    ErrorResponse,
    RateLimitedResponse,
    SubmitResponse,
)
from src.domain.intake import IntakeController
from src.domain.ports import IntakeStatus

router = APIRouter(tags=["v1"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


@router.options("/applications", include_in_schema=False)
async def applications_preflight() -> Response:
    """Answer CORS preflight for clients that don't send a full preflight request."""
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.post(
    "/applications",
    response_model=SubmitResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or suspicious submission"},
        429: {"model": RateLimitedResponse, "description": "Too many submissions"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
    summary="Submit an application",
    description="Validate, rate-limit and store an application, then notify "
    "the operator and send a confirmation to the applicant.",
)
def submit_application(
    request_data: ApplicationRequest,
    background_tasks: BackgroundTasks,
    client_key: str = Depends(get_client_key),
    idempotency_key: str | None = Header(default=None, max_length=128),
    controller: IntakeController = Depends(get_intake_controller),
) -> SubmitResponse | JSONResponse:
    """
    Submit an application.

    Runs in a worker thread; a client disconnect does not abort the store
    write. Notifications are queued as background tasks and sent after the
    response.
    """
    submission = request_data.to_submission(request_id=idempotency_key)
    result = controller.submit(submission, client_key, schedule=background_tasks.add_task)

    if result.status is IntakeStatus.ACCEPTED:
        return SubmitResponse(message=result.message)

    if result.status is IntakeStatus.RATE_LIMITED:
        body = RateLimitedResponse(error=result.message, retry_after=result.retry_after.isoformat())
        retry_seconds = result.retry_after_seconds(controller.clock())
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=body.model_dump(by_alias=True),
            headers={"Retry-After": str(retry_seconds)},
        )

    if result.status is IntakeStatus.REJECTED:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=result.message).model_dump(),
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=result.message).model_dump(),
    )
