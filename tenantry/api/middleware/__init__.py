"""FastAPI middleware package for cross-cutting request/response concerns.

- **RequestContextMiddleware**: Manages correlation IDs and request context
- **RequestLoggingMiddleware**: Request logging with performance tracking
- **TenantContextMiddleware**: Resolves the tenant serving each request
- **TenantMetricsMiddleware**: Records every request on the tenant's metrics
- **error_handler**: Exception handlers rendering ``{success: false, error}``

Middleware run in this order on the way in:
1. Request context (sets up correlation IDs)
2. Request logging (assigns request IDs, logs with correlation context)
3. Tenant context (answers 404 for hosts no tenant serves)
4. Tenant metrics (times the request, after the tenant is known)
"""
