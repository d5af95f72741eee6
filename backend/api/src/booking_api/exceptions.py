"""FastAPI exception handlers producing the common error body.

Every failure leaves the API as ``ErrorResponse`` JSON:
``{"success": false, "error_code", "message", "statusCode", "details"}``.

- BookingError: status from the error code's category
- Request validation errors: 400 with INVALID_REQUEST
- Anything else: 500 with "Internal error"

Usage:
    from booking_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from booking_api.models.common import format_validation_errors
from booking_core.models.errors import BookingError, ErrorCode, ErrorResponse
from booking_core.utils.logging import get_logger

logger = get_logger(__name__)


def error_body(response: ErrorResponse) -> dict[str, Any]:
    """JSON body of an error response."""
    return response.model_dump(mode="json", by_alias=True)


def validation_error_response(errors: list[Any]) -> ErrorResponse:
    """Wrap pydantic/FastAPI validation errors in an INVALID_REQUEST response."""
    details = format_validation_errors(errors)
    return ErrorResponse.from_code(
        ErrorCode.INVALID_REQUEST,
        {"errors": [d.model_dump() for d in details]},
    )


def internal_error_response() -> ErrorResponse:
    return ErrorResponse.from_code(ErrorCode.INTERNAL)


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Convert a BookingError to its JSON response."""
    response = exc.to_response()
    return JSONResponse(status_code=response.status_code, content=error_body(response))


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report schema failures with the common body and status 400."""
    response = validation_error_response(list(exc.errors()))
    return JSONResponse(status_code=response.status_code, content=error_body(response))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without exposing internals."""
    logger.exception("Unhandled exception: %s", exc)
    response = internal_error_response()
    return JSONResponse(status_code=response.status_code, content=error_body(response))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(BookingError, booking_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
