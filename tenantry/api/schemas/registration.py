"""Documentation models for the registration endpoint.

The endpoint reads its body as raw JSON so that every field problem is
reported together in the envelope; these models only describe the wire
format in the OpenAPI schema.
"""

from typing import Any

from pydantic import BaseModel, Field


class RegistrationRequest(BaseModel):
    """Body accepted by ``POST /register``."""

    email: str = Field(..., max_length=255, examples=["ada@example.com"])
    email2: str = Field(..., description="Must repeat email exactly")
    password: str = Field(..., min_length=12, max_length=60)
    password2: str = Field(..., description="Must repeat password exactly")
    firstname: str = Field(..., min_length=1, max_length=20, examples=["Ada"])
    lastname: str = Field(..., min_length=1, max_length=20, examples=["Lovelace"])


class RegistrationEnvelope(BaseModel):
    """Response of every registration attempt."""

    success: bool
    data: dict[str, Any] = Field(
        ...,
        description="Created user on success, the redacted input otherwise",
        examples=[{"id": 1, "email": "ada@example.com"}],
    )
    errors: list[str] = Field(
        ...,
        examples=[["email2 must match email"]],
    )
