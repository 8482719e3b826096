"""Per-tenant request metrics.

A :class:`TenantMetrics` instance lives as long as its tenant and is shared
by every concurrent request for that tenant. All mutation goes through
:meth:`TenantMetrics.record_request`, which applies the request, error and
route updates under a single lock so no increment is lost. Readers take a
:class:`MetricsSnapshot`, an immutable copy whose averages are derived at
read time.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

AVERAGE_PRECISION = 2


@dataclass(slots=True)
class RouteStats:
    """Mutable counters for one route key."""

    count: int = 0
    total_time_ms: float = 0.0


@dataclass(frozen=True, slots=True)
class RouteSnapshot:
    """Counters for one route key at snapshot time."""

    route: str
    calls: int
    total_time_ms: float

    @property
    def avg_response_ms(self) -> float:
        """Mean response time in milliseconds, 0 for a route never called."""
        if not self.calls:
            return 0
        return round(self.total_time_ms / self.calls, AVERAGE_PRECISION)


@dataclass(frozen=True, slots=True)
class MetricsSnapshot:
    """A consistent copy of a tenant's counters."""

    start_time: datetime
    total_requests: int
    total_errors: int
    routes: tuple[RouteSnapshot, ...]

    def route(self, route_key: str) -> RouteSnapshot | None:
        """Find the snapshot of one route key."""
        return next((r for r in self.routes if r.route == route_key), None)


class TenantMetrics:
    """Running request counters for one tenant.

    Args:
        clock: Source of the start time, for tests.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self.start_time = (clock or (lambda: datetime.now(UTC)))()
        self._lock = threading.Lock()
        self._total_requests = 0
        self._total_errors = 0
        self._routes: dict[str, RouteStats] = {}

    def record_request(
        self, route_key: str, elapsed_ms: float, *, is_error: bool = False
    ) -> None:
        """Record one completed request.

        Args:
            route_key: Method and path the request was matched to.
            elapsed_ms: Time spent handling the request.
            is_error: Whether the request ended in an error.

        Raises:
            ValueError: If the route key is empty or the time is negative.
        """
        if not route_key:
            msg = "route_key must not be empty"
            raise ValueError(msg)
        if elapsed_ms < 0:
            msg = f"elapsed_ms must be non-negative, got {elapsed_ms}"
            raise ValueError(msg)

        with self._lock:
            self._total_requests += 1
            if is_error:
                self._total_errors += 1
            stats = self._routes.get(route_key)
            if stats is None:
                stats = self._routes[route_key] = RouteStats()
            stats.count += 1
            stats.total_time_ms += elapsed_ms

    @property
    def total_requests(self) -> int:
        """Requests recorded since the tenant started."""
        with self._lock:
            return self._total_requests

    @property
    def total_errors(self) -> int:
        """Failed requests recorded since the tenant started."""
        with self._lock:
            return self._total_errors

    def snapshot(self) -> MetricsSnapshot:
        """Copy all counters atomically.

        Returns:
            MetricsSnapshot: Totals and per-route counters, routes in the order
                they were first seen.
        """
        with self._lock:
            return MetricsSnapshot(
                start_time=self.start_time,
                total_requests=self._total_requests,
                total_errors=self._total_errors,
                routes=tuple(
                    RouteSnapshot(key, stats.count, stats.total_time_ms)
                    for key, stats in self._routes.items()
                ),
            )
