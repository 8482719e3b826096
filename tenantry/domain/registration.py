"""User registration workflow.

The workflow validates a request body, hashes the password and asks the
tenant's user store to create the user. It has three terminal outcomes:

- **400**: the body failed validation
- **409**: the store reports the email as already registered
- **201**: the user was created

Any other store failure is logged on the tenant logger and reported as a
generic 500. Every failure path echoes the caller's input back through the
same :func:`redact_secrets` call, so secrets never leave the service; the
success path returns only ``id`` and ``email``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from tenantry.core.exceptions import (
    ConflictError,
    DuplicateKeyError,
    StorageError,
    TenantryError,
    ValidationError,
)
from tenantry.core.observability import trace_operation
from tenantry.core.security import hash_password
from tenantry.domain.users import NewUser, UserStore
from tenantry.domain.validation import (
    CompareField,
    EmailField,
    PasswordField,
    Schema,
    StringField,
)

if TYPE_CHECKING:
    from loguru import Logger

    from tenantry.core.types import JsonObject

SECRET_FIELDS: Final[frozenset[str]] = frozenset({"password", "password2"})

EMAIL_TAKEN_MESSAGE: Final[str] = "Email already registered"
REGISTRATION_FAILED_MESSAGE: Final[str] = "Registration failed"
BODY_NOT_OBJECT_MESSAGE: Final[str] = "Request body must be a JSON object"

REGISTRATION_SCHEMA: Final[Schema] = Schema(
    {
        "email": EmailField(min_length=1, max_length=255, required=True),
        "email2": CompareField(compare_to="email", required=True),
        "password": PasswordField(min_length=12, max_length=60, required=True),
        "password2": CompareField(compare_to="password", required=True),
        "firstname": StringField(min_length=1, max_length=20, required=True),
        "lastname": StringField(min_length=1, max_length=20, required=True),
    },
    name="register",
)


def redact_secrets(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy ``data`` without its secret fields.

    The input is left untouched and applying the function twice gives the
    same result as applying it once.

    Args:
        data: A request body or any other mapping about to be returned.

    Returns:
        dict[str, Any]: A new dict without ``password`` and ``password2``.
    """
    return {key: value for key, value in data.items() if key not in SECRET_FIELDS}


@dataclass(frozen=True, slots=True)
class RegistrationOutcome:
    """What the API answers for one registration attempt."""

    status_code: int
    data: JsonObject
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether the user was created."""
        return self.status_code < 400

    def to_envelope(self) -> JsonObject:
        """Render the ``{success, data, errors}`` response body."""
        return {"success": self.success, "data": self.data, "errors": self.errors}


class RegistrationWorkflow:
    """Registers users into a tenant's store.

    The workflow holds no per-request state and may be shared by every
    request of every tenant.

    Args:
        schema: Schema applied to request bodies.
        hasher: Turns the validated password into the stored hash.
    """

    def __init__(
        self,
        schema: Schema = REGISTRATION_SCHEMA,
        hasher: Callable[[str], str] = hash_password,
    ) -> None:
        self.schema = schema
        self.hasher = hasher

    async def register(
        self, body: object, *, store: UserStore, log: Logger
    ) -> RegistrationOutcome:
        """Run one registration attempt.

        Args:
            body: The decoded request body (anything JSON can produce).
            store: The tenant's user store.
            log: The tenant's logger.

        Returns:
            RegistrationOutcome: Status code, response data and errors.
        """
        if not isinstance(body, Mapping):
            return RegistrationOutcome(400, {}, [BODY_NOT_OBJECT_MESSAGE])

        try:
            return await self._create(body, store, log)
        except TenantryError as exc:
            return RegistrationOutcome(
                exc.status_code, redact_secrets(body), exc.errors
            )

    async def _create(
        self, body: Mapping[str, Any], store: UserStore, log: Logger
    ) -> RegistrationOutcome:
        outcome = self.schema.validate(body)
        if not outcome.is_valid:
            log.info(
                "Registration rejected by validation",
                error_count=len(outcome.errors),
            )
            raise ValidationError(outcome.errors)

        values = outcome.validated
        # Key stretching is CPU bound; keep it off the event loop
        password_hash = await asyncio.to_thread(self.hasher, values["password"])
        user = NewUser(
            email=values["email"],
            password_hash=password_hash,
            firstname=values["firstname"],
            lastname=values["lastname"],
        )

        try:
            with trace_operation("users.create"):
                record = await store.create(user)
        except DuplicateKeyError as exc:
            log.info("Registration conflict on {}", exc.key)
            raise ConflictError(EMAIL_TAKEN_MESSAGE, cause=exc) from exc
        except Exception as exc:
            log.opt(exception=exc).error(
                "User store failed during registration: {}", type(exc).__name__
            )
            raise StorageError(REGISTRATION_FAILED_MESSAGE, cause=exc) from exc

        log.info("User registered", user_id=record.id)
        return RegistrationOutcome(201, {"id": record.id, "email": record.email}, [])
