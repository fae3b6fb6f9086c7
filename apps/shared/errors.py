"""
Secure Error Handling

Error taxonomy for the API plus the handlers that turn every failure into a
`{"error": <category>, "message": <text>}` JSON body. Details of unexpected
errors are logged server-side and never sent to the client.
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    category = "Server error"
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    category = "Validation error"
    default_message = "Invalid request"


class InvalidIdentifier(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    category = "Invalid ID"
    default_message = "Provided ID is not valid"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    category = "Not found"
    default_message = "Resource not found"


class ServerError(ApiError):
    pass


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Create blog post")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    # Log full error server-side
    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=True
    )

    # Return sanitized message for client
    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


def error_response(category: str, message: str, status_code: int) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": category,
            "message": message,
        },
    )


def setup_error_handlers(app: FastAPI, validation_message: str = "Invalid request") -> None:
    """
    Register JSON error handlers on a FastAPI app.

    Args:
        app: The application
        validation_message: Message used when a request body or parameter
            fails FastAPI's own validation
    """

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return error_response(exc.category, exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
        return error_response(
            ValidationError.category,
            validation_message,
            status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods are both "no such route"
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return error_response(
                NotFound.category,
                "Route not found",
                status.HTTP_404_NOT_FOUND,
            )

        if exc.status_code >= 500:
            category = ServerError.category
        else:
            category = "Client error"
        return error_response(category, str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}", exc_info=exc)
        return error_response(
            ServerError.category,
            ServerError.default_message,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
