"""Pydantic models describing API responses.

- **errors**: The ``{success: false, error}`` body of escaped errors
- **system**: Diagnostic endpoint responses, camelCase on the wire
- **registration**: Registration request and envelope, for the OpenAPI schema
"""
