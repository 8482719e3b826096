"""Response models for the diagnostic endpoints.

Wire names are camelCase (``uptimeSeconds``, ``avgResponseMs``); Python
attributes stay snake_case.
"""

from datetime import UTC, datetime
from email.utils import format_datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tenantry.core.constants import MILLISECONDS_PER_SECOND, SECONDS_PER_MINUTE
from tenantry.domain.metrics import MetricsSnapshot


class CamelModel(BaseModel):
    """Base for models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    """Liveness with the tenant's start time and the process uptime."""

    ok: bool = True
    message: str = "health check"
    started: datetime = Field(..., description="When the tenant was created")
    uptime_seconds: float = Field(..., description="Process uptime")
    now: datetime


class ReadinessResponse(CamelModel):
    """Static readiness answer."""

    ok: bool = True
    message: str = "ready"


class InfoResponse(CamelModel):
    """Host facts plus the tenant's request totals."""

    ok: bool = True
    hostname: str
    platform: str
    release: str
    arch: str
    total_mem: int = Field(..., description="Total memory in bytes")
    used_mem: int = Field(..., description="Used memory in bytes")
    mem_used_percent: float
    cpu_model: str
    cpu_cores: int
    ip: str
    uptime_seconds: float = Field(..., description="Host uptime")
    timezone: str
    current_time: datetime
    tenant: str
    started: datetime
    total_requests: int
    total_errors: int


class TimestampResponse(CamelModel):
    """The current time in several representations."""

    ok: bool = True
    iso: str = Field(..., examples=["2026-10-18T09:30:00.123Z"])
    utc: str = Field(..., examples=["Sun, 18 Oct 2026 09:30:00 GMT"])
    local: str = Field(..., examples=["Sun Oct 18 2026 11:30:00 GMT+0200 (CEST)"])
    timestamp: int = Field(..., description="Milliseconds since the epoch")
    timezone: str
    offset_minutes: int = Field(
        ..., description="UTC minus local time, in minutes (east of UTC < 0)"
    )

    @classmethod
    def at(cls, now: datetime, timezone: str) -> "TimestampResponse":
        """Describe an aware instant.

        Args:
            now: The instant, in any timezone.
            timezone: Name of the server's local timezone.

        Returns:
            TimestampResponse: The instant in UTC and in local time.
        """
        utc_now = now.astimezone(UTC)
        local_now = now.astimezone()
        offset = local_now.utcoffset()
        offset_seconds = int(offset.total_seconds()) if offset else 0
        return cls(
            iso=utc_now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            utc=format_datetime(utc_now, usegmt=True),
            local=local_now.strftime("%a %b %d %Y %H:%M:%S GMT%z (%Z)"),
            timestamp=int(utc_now.timestamp() * MILLISECONDS_PER_SECOND),
            timezone=timezone,
            offset_minutes=-offset_seconds // SECONDS_PER_MINUTE,
        )


class RouteMetrics(CamelModel):
    """Counters for one route key."""

    route: str = Field(..., examples=["GET /health"])
    calls: int
    avg_response_ms: float


class RoutesResponse(CamelModel):
    """The tenant's per-route metrics in first-seen order."""

    ok: bool = True
    tenant: str
    total_requests: int
    total_errors: int
    timezone: str
    routes: list[RouteMetrics]

    @classmethod
    def from_snapshot(
        cls, tenant: str, snapshot: MetricsSnapshot, timezone: str
    ) -> "RoutesResponse":
        """Format a metrics snapshot."""
        return cls(
            tenant=tenant,
            total_requests=snapshot.total_requests,
            total_errors=snapshot.total_errors,
            timezone=timezone,
            routes=[
                RouteMetrics(
                    route=route.route,
                    calls=route.calls,
                    avg_response_ms=route.avg_response_ms,
                )
                for route in snapshot.routes
            ],
        )
