"""Request tracing for the booking API.

Every HTTP request runs under one correlation ID, taken from the
``X-Correlation-ID`` header, else from the Lambda request ID when running
behind Mangum, else freshly generated. The ID is echoed on the response and
prefixes every log line written while the request is served.
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from booking_core.utils.logging import clear_correlation_id, get_logger, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"

logger = get_logger("booking_api.access")


def incoming_correlation_id(request: Request) -> str | None:
    """Correlation ID supplied by the caller or the Lambda runtime, if any."""
    header = request.headers.get(CORRELATION_ID_HEADER)
    if header:
        return header
    context = request.scope.get("aws.context")
    return getattr(context, "aws_request_id", None)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to each request and logs its outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = set_correlation_id(incoming_correlation_id(request))
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            logger.info(
                "%s %s -> %d (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            return response
        finally:
            clear_correlation_id()
