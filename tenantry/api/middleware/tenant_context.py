"""Tenant resolution middleware.

Resolves the tenant from the ``Host`` header through the application's
:class:`TenantRegistry`, stores it on ``request.state.tenant`` and binds its
domain to the request's log records.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tenantry.api.schemas.errors import ErrorResponse
from tenantry.api.utils.responses import ORJSONResponse
from tenantry.core.context import RequestContext
from tenantry.core.exceptions import NotFoundError
from tenantry.domain.tenant import TenantRegistry


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Bind every request to its tenant.

    A host no tenant may serve is answered here with a 404; exceptions raised
    in middleware never reach the application's exception handlers.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Resolve the tenant and process the request within its context.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: The downstream response, or a 404 for an unknown host.
        """
        registry: TenantRegistry = request.app.state.tenants
        host = request.headers.get("host")
        try:
            tenant = registry.resolve(host)
        except NotFoundError as exc:
            logger.info("No tenant for host {}", exc.context.get("host"))
            return ORJSONResponse(
                status_code=exc.status_code,
                content=ErrorResponse(error=exc.message).to_content(),
            )

        request.state.tenant = tenant
        RequestContext.set_tenant_domain(tenant.domain)
        with logger.contextualize(tenant=tenant.domain):
            return await call_next(request)
