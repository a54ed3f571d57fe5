"""Correlation ID middleware for request tracing.

Reads X-Correlation-ID from the request (or generates one), exposes it to
every logger through the context variable in ordering.utils.logging, and
echoes it on the response. Stripe webhook deliveries carry no such header,
so each delivery gets a fresh ID.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ordering.utils.logging import clear_correlation_id, get_logger, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"

logger = get_logger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tags each request's log lines and response with a correlation ID."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            logger.info("%s %s -> %d", request.method, request.url.path, response.status_code)
            return response
        finally:
            clear_correlation_id()
