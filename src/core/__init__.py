"""Cross-cutting building blocks shared by every layer.

- **config**: Pydantic settings, including the required database settings
- **context**: Correlation ID storage for the current request
- **exceptions**: Startup and configuration error hierarchy
- **error_context**: Redaction of sensitive values before logging
- **logging**: Loguru setup with console and JSON formatters
- **observability**: OpenTelemetry tracing
"""
