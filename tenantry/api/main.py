"""Application factory.

:func:`create_app` wires settings, the tenant registry, the middleware
stack, the exception handlers and the routers into one FastAPI instance.
Starlette runs middleware in reverse order of registration, so the stack
below is added innermost first.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from tenantry.api.middleware.error_handler import register_exception_handlers
from tenantry.api.middleware.request_context import RequestContextMiddleware
from tenantry.api.middleware.request_logging import RequestLoggingMiddleware
from tenantry.api.middleware.tenant_context import TenantContextMiddleware
from tenantry.api.middleware.tenant_metrics import TenantMetricsMiddleware
from tenantry.api.routers import system, users
from tenantry.api.utils.responses import ORJSONResponse
from tenantry.core.config import Settings, get_settings
from tenantry.core.logging import setup_logging
from tenantry.core.observability import instrument_app, setup_tracing
from tenantry.domain.registration import RegistrationWorkflow
from tenantry.domain.tenant import StoreFactory, TenantRegistry
from tenantry.infrastructure.database.session import (
    check_database_connection,
    close_database,
    init_models,
)
from tenantry.infrastructure.database.user_store import SqlUserStore
from tenantry.infrastructure.memory_store import InMemoryUserStore


def build_store_factory(settings: Settings) -> StoreFactory:
    """Pick the user store backend configured for new tenants.

    Args:
        settings: Application settings.

    Returns:
        StoreFactory: Builds a store for a tenant domain.
    """
    if settings.tenant_config.user_store == "database":
        return SqlUserStore

    return lambda _domain: InMemoryUserStore()


def build_registry(settings: Settings) -> TenantRegistry:
    """Create the tenant registry from settings."""
    return TenantRegistry(
        build_store_factory(settings),
        allowed_domains=settings.tenant_config.allowed_domains,
        default_domain=settings.tenant_config.default_domain,
        max_tenants=settings.tenant_config.max_tenants,
    )


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Check the user store backend on startup and release it on shutdown.

    The in-memory backend needs nothing. The database backend refuses to
    start when PostgreSQL does not answer, optionally creates the tables,
    and disposes the pool on the way out.

    Raises:
        RuntimeError: PostgreSQL is unreachable at startup.
    """
    settings: Settings = app_instance.state.settings
    uses_database = settings.tenant_config.user_store == "database"

    if uses_database:
        is_healthy, error_msg = await check_database_connection()
        if not is_healthy:
            logger.error("PostgreSQL unreachable at startup: {}", error_msg)
            msg = f"Database connection failed: {error_msg}"
            raise RuntimeError(msg)
        logger.info("PostgreSQL reachable")

        if settings.database_config.create_tables:
            await init_models()

    logger.info(
        "{} v{} started with the {} user store",
        app_instance.title,
        app_instance.version,
        settings.tenant_config.user_store,
    )

    yield

    if uses_database:
        await close_database()
    logger.info("{} stopped", app_instance.title)


def create_app(
    settings: Settings | None = None, registry: TenantRegistry | None = None
) -> FastAPI:
    """Build the service.

    Args:
        settings: Settings to run with; the cached environment settings
            when omitted.
        registry: Tenant registry to serve; built from ``settings`` when
            omitted. Tests pass one with a stub store factory.

    Returns:
        FastAPI: The configured application.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    # No debug flag: Starlette's debug page would replace the JSON error handler
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.settings = settings
    if registry is None:
        registry = build_registry(settings)
    application.state.tenants = registry
    application.state.registration = RegistrationWorkflow()

    register_exception_handlers(application)

    # 4. Tenant metrics (times the request once the tenant is known)
    application.add_middleware(TenantMetricsMiddleware)

    # 3. Tenant context (resolves the tenant from the Host header)
    application.add_middleware(TenantContextMiddleware)

    # 2. Request logging (assigns X-Request-ID)
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)

    # 1. Request context (outermost, owns the correlation ID)
    application.add_middleware(RequestContextMiddleware)

    application.include_router(system.router, prefix=settings.api_prefix)
    application.include_router(users.router, prefix=settings.api_prefix)

    instrument_app(application, settings)

    return application


app = create_app()
