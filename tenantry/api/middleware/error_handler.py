"""Turning exceptions into JSON error envelopes.

Every error that escapes a route is rendered as an :class:`ErrorResponse`:

- ``TenantryError``: its own status code and client-safe message
- ``HTTPException``: ``"Not Found"`` for 404, the reason phrase otherwise
- anything else: the exception's ``status_code`` (default 500) with its
  message and traceback outside production, ``"Server Error"`` in production

Errors are logged on the tenant logger when the request was already bound to
a tenant.
"""

import traceback
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from tenantry.api.constants import (
    CORRELATION_ID_HEADER,
    HTTP_500_INTERNAL_SERVER_ERROR,
    NOT_FOUND_MESSAGE,
    REQUEST_ID_HEADER,
)
from tenantry.api.schemas.errors import ErrorResponse
from tenantry.api.utils.responses import ORJSONResponse
from tenantry.core.config import get_settings
from tenantry.core.constants import GENERIC_SERVER_ERROR
from tenantry.core.context import RequestContext
from tenantry.core.error_context import sanitize_error_context
from tenantry.core.exceptions import TenantryError

if TYPE_CHECKING:
    from loguru import Logger

_MIN_ERROR_STATUS = 400
_MAX_ERROR_STATUS = 599


def _request_logger(request: Request) -> "Logger":
    """The tenant logger bound to the request, or the root logger."""
    tenant = getattr(request.state, "tenant", None)
    return tenant.log if tenant is not None else logger


def _status_of(exc: Exception) -> int:
    """HTTP status carried by an arbitrary exception, 500 when absent."""
    code = getattr(exc, "status_code", None)
    if isinstance(code, int) and _MIN_ERROR_STATUS <= code <= _MAX_ERROR_STATUS:
        return code
    return HTTP_500_INTERNAL_SERVER_ERROR


def _context_headers(request: Request) -> dict[str, str]:
    """Tracing headers for responses built outside the middleware stack."""
    headers: dict[str, str] = {}
    correlation_id = RequestContext.get_correlation_id()
    if correlation_id:
        headers[CORRELATION_ID_HEADER] = correlation_id
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        headers[REQUEST_ID_HEADER] = request_id
    return headers


async def tenantry_error_handler(request: Request, exc: Exception) -> Response:
    """Answer with the error's own status and client-safe message.

    Expected errors are logged as warnings, the rest with a traceback.
    """
    if not isinstance(exc, TenantryError):
        raise TypeError(f"Expected TenantryError, got {type(exc).__name__}")

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
        },
    )
    log = _request_logger(request)
    if exc.is_expected:
        log.warning(
            "Handling {}: {}", type(exc).__name__, exc.message, **error_context
        )
    else:
        log.opt(exception=exc).error(
            "Handling {}: {}", type(exc).__name__, exc.message, **error_context
        )

    return ORJSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).to_content(),
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Answer routing errors: unknown paths, disallowed methods."""
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = NOT_FOUND_MESSAGE
    else:
        message = str(exc.detail)

    _request_logger(request).info(
        "Routing error {}",
        exc.status_code,
        status_code=exc.status_code,
        method=request.method,
        path=str(request.url.path),
    )

    return ORJSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=message).to_content(),
        headers=exc.headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle exceptions no other handler claimed.

    This handler runs outside the middleware stack, so it adds the tracing
    headers itself.

    Returns:
        Response: Message and stack trace outside production, a bare
            ``"Server Error"`` in production.
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    status_code = _status_of(exc)

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )
    _request_logger(request).opt(exception=exc).error(
        "Unhandled exception: {}",
        type(exc).__name__,
        status_code=status_code,
        **error_context,
    )

    if settings.is_production:
        body = ErrorResponse(error=GENERIC_SERVER_ERROR)
    else:
        body = ErrorResponse(
            error=str(exc) or type(exc).__name__,
            stack="".join(traceback.format_exception(exc)),
        )

    return ORJSONResponse(
        status_code=status_code,
        content=body.to_content(),
        headers=_context_headers(request),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the three handlers on ``app``."""
    app.add_exception_handler(TenantryError, tenantry_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers installed")
