"""Core infrastructure package for shared application functionality.

- **config**: Centralized configuration management with environment support
- **context**: Request context (correlation ID, tenant) management
- **exceptions**: Structured exception hierarchy with error codes
- **error_context**: Sensitive data sanitization for safe logging
- **logging**: Structured logging with per-tenant loggers
- **observability**: Distributed tracing with OpenTelemetry
- **security**: Password hashing
- **types**: Type aliases for JSON-like data
"""
