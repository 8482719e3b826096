"""HTTP API layer built on FastAPI.

Key components:
- **main**: Application factory and lifecycle management
- **middleware**: Cross-cutting concerns for all requests
  - Request context with correlation ID tracking
  - Request logging without bodies or headers
  - Tenant resolution from the Host header
  - Per-tenant request metrics
  - Centralized error handling with consistent responses
- **routers**: Diagnostic endpoints and user registration
- **schemas**: Pydantic response models
- **utils**: orjson-backed JSON responses

The API layer translates between HTTP and the domain: it resolves the tenant,
decodes bodies and renders outcomes, while validation, registration and
metrics live in :mod:`tenantry.domain`.
"""
