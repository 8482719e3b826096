"""Tenants and the registry that resolves them from the Host header.

A tenant is the pair (metrics, user store) behind one normalized domain. The
registry creates tenants lazily on first request and keeps them for the life
of the process.
"""

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from tenantry.core.exceptions import NotFoundError
from tenantry.core.logging import get_tenant_logger
from tenantry.domain.metrics import TenantMetrics
from tenantry.domain.users import UserStore

if TYPE_CHECKING:
    from loguru import Logger

type StoreFactory = Callable[[str], UserStore]


def normalize_host(host: str | None) -> str:
    """Lower-case a Host header value and strip its port.

    Bracketed IPv6 literals keep their brackets.

    Examples:
        >>> normalize_host("Example.COM:8080")
        'example.com'
        >>> normalize_host("[::1]:3000")
        '[::1]'
    """
    value = (host or "").strip().lower()
    if value.startswith("["):
        end = value.find("]")
        return value[: end + 1] if end != -1 else value
    return value.rsplit(":", 1)[0] if value.count(":") == 1 else value


@dataclass(slots=True)
class Tenant:
    """Everything scoped to one domain."""

    domain: str
    users: UserStore
    metrics: TenantMetrics = field(default_factory=TenantMetrics)
    log: "Logger" = field(init=False)

    def __post_init__(self) -> None:
        self.log = get_tenant_logger(self.domain)


class TenantRegistry:
    """Maps hosts to tenants, creating each tenant once.

    Without an allow-list every Host header names a tenant, so the number of
    tenants created lazily is capped. Once the cap is reached, new hosts are
    served by ``default_domain`` when one is configured and get a 404
    otherwise. Existing tenants keep working.

    Args:
        store_factory: Builds the user store for a new tenant's domain.
        allowed_domains: Domains that may become tenants. Empty allows any.
        default_domain: Tenant used for hosts outside ``allowed_domains``.
        max_tenants: Most tenants kept at once; ``None`` for no limit.
    """

    def __init__(
        self,
        store_factory: StoreFactory,
        allowed_domains: Iterable[str] = (),
        default_domain: str | None = None,
        max_tenants: int | None = None,
    ) -> None:
        self._store_factory = store_factory
        self._allowed = frozenset(normalize_host(d) for d in allowed_domains)
        self._default = normalize_host(default_domain) if default_domain else None
        self._max_tenants = max_tenants
        self._tenants: dict[str, Tenant] = {}
        self._lock = threading.Lock()

    def _domain_for(self, host: str | None) -> str:
        domain = normalize_host(host)
        if domain and (not self._allowed or domain in self._allowed):
            return domain
        if self._default:
            return self._default
        raise NotFoundError("Not Found", context={"host": domain or None})

    def _is_full(self) -> bool:
        return self._max_tenants is not None and len(self._tenants) >= self._max_tenants

    def _create(self, domain: str) -> Tenant:
        tenant = Tenant(domain=domain, users=self._store_factory(domain))
        self._tenants[domain] = tenant
        tenant.log.info("Tenant created")
        return tenant

    def resolve(self, host: str | None) -> Tenant:
        """Return the tenant serving ``host``, creating it on first use.

        Args:
            host: Raw Host header value.

        Returns:
            Tenant: The tenant for the normalized host.

        Raises:
            NotFoundError: If no tenant may serve the host.
        """
        domain = self._domain_for(host)
        tenant = self._tenants.get(domain)
        if tenant is not None:
            return tenant

        with self._lock:
            tenant = self._tenants.get(domain)
            if tenant is not None:
                return tenant
            if not self._is_full():
                return self._create(domain)

            logger.warning(
                "Tenant limit of {} reached, refusing {}", self._max_tenants, domain
            )
            if self._default:
                return self._tenants.get(self._default) or self._create(self._default)
            raise NotFoundError("Not Found", context={"host": domain})

    def get(self, domain: str) -> Tenant | None:
        """Look up an existing tenant without creating it."""
        return self._tenants.get(normalize_host(domain))

    @property
    def domains(self) -> list[str]:
        """Domains of the tenants created so far."""
        with self._lock:
            return list(self._tenants)
