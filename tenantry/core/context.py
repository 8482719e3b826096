"""Per-request identifiers kept in context variables.

Each request runs in its own task, so values set while handling one request
are invisible to every other request, including across ``await`` points.
"""

import uuid
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_tenant_domain_var: ContextVar[str | None] = ContextVar("tenant_domain", default=None)


class RequestContext:
    """Accessors for the correlation ID and tenant of the running request."""

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """The correlation ID, or ``None`` outside a request."""
        return _correlation_id_var.get()

    @staticmethod
    def set_tenant_domain(domain: str) -> None:
        _tenant_domain_var.set(domain)

    @staticmethod
    def get_tenant_domain() -> str | None:
        """Domain of the tenant serving the request, once resolved."""
        return _tenant_domain_var.get()

    @staticmethod
    def clear() -> None:
        """Forget both values."""
        _correlation_id_var.set(None)
        _tenant_domain_var.set(None)


def generate_correlation_id() -> str:
    """A fresh UUID4 shared by every log line of one request.

    Examples:
        >>> len(generate_correlation_id())
        36
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """A fresh ``req-<uuid4>`` identifier echoed as ``X-Request-ID``."""
    return f"req-{uuid.uuid4()}"
