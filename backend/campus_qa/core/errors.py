"""
Error responses shared by the routers.

Expected business outcomes are 400s carrying a human-readable message.
Unexpected failures are logged with their stack trace and surface as a
generic 500; the underlying message is only exposed outside production.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from campus_qa.core.config import Settings

logger = logging.getLogger(__name__)

INVALID_REQUEST = "Dữ liệu không hợp lệ"
QUESTION_REQUIRED = "Question is required"


class AccountError(Exception):
    """An expected account-flow failure (wrong password, expired OTP, ...)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def account_error_response(exc: AccountError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": exc.message},
    )


def server_error_response(
    message: str, exc: Exception, settings: Settings
) -> JSONResponse:
    logger.exception("%s: %s", message, exc)
    content = {"success": False, "message": message}
    if not settings.is_production:
        content["detail"] = str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400s instead of FastAPI's 422."""
    if request.url.path == "/ask":
        # /ask keeps its own error shape, e.g. for a body that is not a JSON object
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": QUESTION_REQUIRED},
        )

    errors = exc.errors()
    message = INVALID_REQUEST
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = " ".join(part for part in (field, first.get("msg", "")) if part)
        if detail:
            message = f"{INVALID_REQUEST}: {detail}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message},
    )
