"""
Exception handlers - Keep every error response in the {"error": ...} shape.

Malformed bodies are a caller mistake (400, generic message, no field
echo). Anything unhandled is an infrastructure problem: logged in full,
reported generically (500).
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domain.intake import INTERNAL_ERROR_MESSAGE

logger = logging.getLogger(__name__)

MALFORMED_REQUEST_MESSAGE = "Requête invalide"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Malformed request on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": MALFORMED_REQUEST_MESSAGE},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
