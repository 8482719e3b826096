"""Schema-driven validation of untrusted input objects."""

from tenantry.domain.validation.fields import (
    MISSING,
    CompareField,
    EmailField,
    EnumField,
    FieldConstraint,
    FieldError,
    PasswordField,
    StringField,
)
from tenantry.domain.validation.schema import Schema, ValidationOutcome

__all__ = [
    "MISSING",
    "CompareField",
    "EmailField",
    "EnumField",
    "FieldConstraint",
    "FieldError",
    "PasswordField",
    "Schema",
    "StringField",
    "ValidationOutcome",
]
