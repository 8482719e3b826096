"""Tenant-aware diagnostic endpoints.

Routes:
- ``GET /health``: tenant start time and process uptime
- ``GET /readiness``: readiness probe
- ``GET /info``: host facts and the tenant's request totals
- ``GET /timestamp``: current server time in several formats
- ``GET /routes``: per-route metrics for the current tenant

All handlers only read and format; none of them mutates tenant state.
"""

from datetime import UTC, datetime

from fastapi import APIRouter

from tenantry.api.dependencies import TenantDep
from tenantry.api.schemas.system import (
    HealthResponse,
    InfoResponse,
    ReadinessResponse,
    RoutesResponse,
    TimestampResponse,
)
from tenantry.infrastructure import host

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health(tenant: TenantDep) -> HealthResponse:
    """Liveness check for the current tenant."""
    return HealthResponse(
        started=tenant.metrics.start_time,
        uptime_seconds=host.process_uptime_seconds(),
        now=datetime.now(UTC),
    )


@router.get("/readiness", response_model=ReadinessResponse)
async def readiness() -> ReadinessResponse:
    """Readiness probe."""
    return ReadinessResponse()


@router.get("/info", response_model=InfoResponse)
async def info(tenant: TenantDep) -> InfoResponse:
    """Host facts plus the tenant's totals.

    Returns:
        InfoResponse: Hostname, OS, memory, CPU, network and uptime facts with
            the tenant domain, start time and request counters.
    """
    snapshot = tenant.metrics.snapshot()
    return InfoResponse.model_validate(
        {
            **host.system_info(),
            "tenant": tenant.domain,
            "started": snapshot.start_time,
            "totalRequests": snapshot.total_requests,
            "totalErrors": snapshot.total_errors,
        }
    )


@router.get("/timestamp", response_model=TimestampResponse)
async def timestamp() -> TimestampResponse:
    """Current server time."""
    return TimestampResponse.at(datetime.now(UTC), host.local_timezone_name())


@router.get("/routes", response_model=RoutesResponse)
async def routes(tenant: TenantDep) -> RoutesResponse:
    """Per-route call counts and mean response times."""
    return RoutesResponse.from_snapshot(
        tenant.domain, tenant.metrics.snapshot(), host.local_timezone_name()
    )
