"""User registration endpoint."""

import orjson
from fastapi import APIRouter, Request
from fastapi.responses import Response

from tenantry.api.dependencies import RegistrationDep, TenantDep
from tenantry.api.schemas.registration import (
    RegistrationEnvelope,
    RegistrationRequest,
)
from tenantry.api.utils.responses import ORJSONResponse

router = APIRouter(tags=["users"])


async def _read_json(request: Request) -> object:
    """Decode the request body, or None when it is not valid JSON."""
    try:
        return orjson.loads(await request.body())
    except orjson.JSONDecodeError:
        return None


@router.post(
    "/register",
    status_code=201,
    response_model=RegistrationEnvelope,
    responses={
        400: {"model": RegistrationEnvelope, "description": "Validation failed"},
        409: {"model": RegistrationEnvelope, "description": "Email taken"},
        500: {"model": RegistrationEnvelope, "description": "Storage failure"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": RegistrationRequest.model_json_schema(),
                }
            },
        }
    },
)
async def register(
    request: Request, tenant: TenantDep, workflow: RegistrationDep
) -> Response:
    """Register a user with the current tenant.

    Every validation problem is reported at once in ``errors``; failure
    responses echo the input without its passwords.
    """
    body = await _read_json(request)
    outcome = await workflow.register(body, store=tenant.users, log=tenant.log)
    return ORJSONResponse(
        status_code=outcome.status_code, content=outcome.to_envelope()
    )
