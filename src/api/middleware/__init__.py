"""FastAPI middleware and exception handling for every request.

- **RequestContextMiddleware**: Manages correlation IDs and request context
- **RequestLoggingMiddleware**: Structured request logging with timing
- **error_handler**: Maps failures and exceptions to the API's error bodies

Middleware order matters: the request context is set up first so the request
log and any error log carry the correlation ID.
"""
