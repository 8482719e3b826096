"""Per-tenant request metrics middleware.

Times every request and records it on the tenant's :class:`TenantMetrics`
under the key ``"<METHOD> <route>"``. The route is the matched path template
(``/users/{id}`` rather than ``/users/42``) including the API prefix.
Requests that matched no route share one ``<unmatched>`` key, so scanning
random paths cannot grow the metrics. A request counts as an error when it
answers with a 4xx or 5xx status or raises.
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tenantry.api.constants import HTTP_400_BAD_REQUEST, UNMATCHED_ROUTE
from tenantry.core.constants import MILLISECONDS_PER_SECOND
from tenantry.domain.tenant import Tenant


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND


def route_key(request: Request, prefix: str = "") -> str:
    """Metrics key for a request: method and prefixed route template.

    Depending on the FastAPI release, routes included under a prefix report
    their template with or without it, so ``prefix`` is added when missing.
    """
    template = getattr(request.scope.get("route"), "path", None)
    if not template:
        return f"{request.method} {UNMATCHED_ROUTE}"
    if prefix and template != prefix and not template.startswith(f"{prefix}/"):
        template = f"{prefix}{template}"
    return f"{request.method} {template}"


class TenantMetricsMiddleware(BaseHTTPMiddleware):
    """Record every request on the resolved tenant's metrics."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Time the request and record its outcome.

        Raises:
            Exception: Any exception raised downstream, after it is recorded.
        """
        tenant: Tenant | None = getattr(request.state, "tenant", None)
        if tenant is None:
            return await call_next(request)

        prefix = request.app.state.settings.api_prefix
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            tenant.metrics.record_request(
                route_key(request, prefix), _elapsed_ms(start_time), is_error=True
            )
            raise

        tenant.metrics.record_request(
            route_key(request, prefix),
            _elapsed_ms(start_time),
            is_error=response.status_code >= HTTP_400_BAD_REQUEST,
        )
        return response
