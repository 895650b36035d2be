"""Request context middleware for correlation IDs.

The correlation ID is taken from the ``X-Correlation-ID`` request header, or
generated when absent. It is stored in a context variable, bound to every log
record emitted while the request is handled, and echoed in the response.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.core.context import RequestContext, generate_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"
MAX_CORRELATION_ID_LENGTH = 128


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to manage request context and correlation IDs."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request with context management.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: Response with correlation ID header.
        """
        incoming = request.headers.get(CORRELATION_ID_HEADER, "").strip()
        correlation_id = incoming[:MAX_CORRELATION_ID_LENGTH] or generate_correlation_id()

        RequestContext.set_correlation_id(correlation_id)
        try:
            # contextualize scopes the binding to this request
            with logger.contextualize(correlation_id=correlation_id):
                response = await call_next(request)
                response.headers[CORRELATION_ID_HEADER] = correlation_id
                return response
        finally:
            RequestContext.clear()
