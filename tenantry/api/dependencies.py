"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Request

from tenantry.core.exceptions import NotFoundError
from tenantry.domain.registration import RegistrationWorkflow
from tenantry.domain.tenant import Tenant


def get_tenant(request: Request) -> Tenant:
    """The tenant resolved for this request by the tenant middleware.

    Raises:
        NotFoundError: If the request was not bound to a tenant.
    """
    tenant: Tenant | None = getattr(request.state, "tenant", None)
    if tenant is None:
        raise NotFoundError()
    return tenant


def get_registration(request: Request) -> RegistrationWorkflow:
    """The application's registration workflow."""
    workflow: RegistrationWorkflow = request.app.state.registration
    return workflow


TenantDep = Annotated[Tenant, Depends(get_tenant)]
RegistrationDep = Annotated[RegistrationWorkflow, Depends(get_registration)]
