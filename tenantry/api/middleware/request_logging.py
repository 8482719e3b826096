"""Access log.

Two records per request, one when it arrives and one when it is answered,
plus a warning when it took longer than ``slow_request_threshold_ms``.
Records hold the method, path, client, status, duration and tenant. Bodies
and headers are never logged because registration bodies carry passwords.

Every response carries ``X-Request-ID``, the caller's or a generated one,
including responses on paths that are not logged.
"""

import time

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from tenantry.api.constants import REQUEST_ID_HEADER
from tenantry.core.config import LogConfig
from tenantry.core.constants import MILLISECONDS_PER_SECOND
from tenantry.core.context import generate_request_id


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs requests outside ``log_config.excluded_paths``.

    Args:
        app: The wrapped application.
        log_config: Exclusions and the slow request threshold.
    """

    def __init__(self, app: ASGIApp, *, log_config: LogConfig) -> None:
        super().__init__(app)
        self.log_config = log_config
        self.excluded_paths = frozenset(log_config.excluded_paths)

    def _is_excluded(self, path: str) -> bool:
        # endswith lets /health match under any api_prefix
        return any(path.endswith(excluded) for excluded in self.excluded_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        request.state.request_id = request_id

        if self._is_excluded(request.url.path):
            response = await call_next(request)
        else:
            response = await self._logged(request, call_next, request_id)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    async def _logged(
        self, request: Request, call_next: RequestResponseEndpoint, request_id: str
    ) -> Response:
        client = request.client.host if request.client else "unknown"
        with logger.contextualize(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=client,
        ):
            logger.info("Request received")
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    "Request raised {}",
                    type(exc).__name__,
                    duration_ms=self._since(started),
                    error_type=type(exc).__name__,
                )
                raise

            duration_ms = self._since(started)
            tenant = getattr(request.state, "tenant", None)
            logger.info(
                "Request answered with {}",
                response.status_code,
                status_code=response.status_code,
                duration_ms=duration_ms,
                tenant=tenant.domain if tenant is not None else None,
            )
            threshold = self.log_config.slow_request_threshold_ms
            if duration_ms > threshold:
                logger.warning(
                    "Request exceeded {} ms", threshold, duration_ms=duration_ms
                )
            return response

    @staticmethod
    def _since(started: float) -> float:
        return round((time.perf_counter() - started) * MILLISECONDS_PER_SECOND, 2)
