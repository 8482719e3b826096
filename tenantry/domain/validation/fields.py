"""Typed field validators.

Each field kind is a frozen Pydantic model tagged by ``kind``. The kinds form
a discriminated union, so a field can be declared in code
(``EmailField(max_length=255, required=True)``) or as plain data
(``{"kind": "email", "max": 255, "required": true}``).

Every kind implements ``validate_value(name, raw, validated)``. It returns the
accepted value unchanged, returns :data:`MISSING` for an absent optional
field, or raises :class:`FieldError` with one human-readable message.
Messages name the field but never echo its value. Values are never rewritten,
so a confirmation typed exactly like its target always matches it.
"""

import re
from abc import abstractmethod
from collections.abc import Mapping
from typing import Annotated, Final, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Missing:
    """Marker for a field that is absent from the input."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()

# local@domain.tld, with at least one dot in the domain
EMAIL_PATTERN: Final = re.compile(r"[^@\s]+@[^@\s.]+(?:\.[^@\s.]+)+")


class FieldError(ValueError):
    """A single field failed validation."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def is_empty(raw: object) -> bool:
    """Whether a raw value counts as absent for the required check."""
    return raw is None or raw is MISSING or raw == ""


class BaseField(BaseModel):
    """Rules shared by every field kind."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    required: bool = False

    def validate_value(
        self, name: str, raw: object, validated: Mapping[str, object]
    ) -> object:
        """Validate one raw value.

        Args:
            name: The field name, used in error messages.
            raw: The untrusted input value (``MISSING`` when the key is absent).
            validated: Values already accepted for other fields.

        Returns:
            object: The accepted value, or ``MISSING`` for an absent optional
                field.

        Raises:
            FieldError: If the value violates the field rules.
        """
        if is_empty(raw):
            if self.required:
                raise FieldError(f"{name} is required")
            return MISSING
        return self.check(name, raw, validated)

    @abstractmethod
    def check(self, name: str, raw: object, validated: Mapping[str, object]) -> object:
        """Validate a value that is present. Each kind supplies its own rules."""


class _LengthField(BaseField):
    """A text field with inclusive length bounds."""

    min_length: int | None = Field(default=None, ge=0, alias="min")
    max_length: int | None = Field(default=None, ge=0, alias="max")

    @model_validator(mode="after")
    def check_bounds(self) -> Self:
        """Reject inverted length bounds."""
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            msg = "min must not exceed max"
            raise ValueError(msg)
        return self

    def _require_text(self, name: str, raw: object) -> str:
        if not isinstance(raw, str):
            raise FieldError(f"{name} must be a string")
        return raw

    def _check_length(self, name: str, value: str) -> str:
        low, high = self.min_length, self.max_length
        size = len(value)
        if (low is None or size >= low) and (high is None or size <= high):
            return value
        if low is not None and high is not None:
            raise FieldError(f"{name} must be between {low} and {high} characters")
        if low is not None:
            raise FieldError(f"{name} must be at least {low} characters")
        raise FieldError(f"{name} must be at most {high} characters")


class StringField(_LengthField):
    """Free text. A required value must contain more than whitespace."""

    kind: Literal["string"] = "string"

    def check(self, name: str, raw: object, validated: Mapping[str, object]) -> str:
        value = self._require_text(name, raw)
        if self.required and not value.strip():
            raise FieldError(f"{name} is required")
        return self._check_length(name, value)


class EmailField(_LengthField):
    """An email address, shape checked only."""

    kind: Literal["email"] = "email"

    def check(self, name: str, raw: object, validated: Mapping[str, object]) -> str:
        value = self._require_text(name, raw)
        if not EMAIL_PATTERN.fullmatch(value):
            raise FieldError(f"{name} must be a valid email address")
        return self._check_length(name, value)


class PasswordField(_LengthField):
    """A secret. Only its shape is checked; it is never trimmed or echoed."""

    kind: Literal["password"] = "password"

    def check(self, name: str, raw: object, validated: Mapping[str, object]) -> str:
        return self._check_length(name, self._require_text(name, raw))


class EnumField(BaseField):
    """A value drawn from a fixed set."""

    kind: Literal["enum"] = "enum"
    allowed_values: frozenset[str] = Field(alias="allowedValues", min_length=1)

    def check(self, name: str, raw: object, validated: Mapping[str, object]) -> str:
        if not isinstance(raw, str) or raw not in self.allowed_values:
            allowed = ", ".join(sorted(self.allowed_values))
            raise FieldError(f"{name} must be one of: {allowed}")
        return raw


class CompareField(BaseField):
    """A confirmation field that must equal another field's validated value.

    The comparison uses the target's *validated* value, so a target that
    failed its own rules can never be matched. Case counts.
    """

    kind: Literal["compare"] = "compare"
    compare_to: str = Field(alias="compareTo", min_length=1)

    def validate_value(
        self, name: str, raw: object, validated: Mapping[str, object]
    ) -> object:
        if is_empty(raw) and not self.required:
            # Optional confirmations only apply once their target is present
            if self.compare_to not in validated:
                return MISSING
            return self.check(name, raw, validated)
        return super().validate_value(name, raw, validated)

    def check(self, name: str, raw: object, validated: Mapping[str, object]) -> object:
        target = validated.get(self.compare_to, MISSING)
        if target is MISSING or raw != target:
            raise FieldError(f"{name} must match {self.compare_to}")
        return raw


FieldConstraint = Annotated[
    StringField | EmailField | PasswordField | EnumField | CompareField,
    Field(discriminator="kind"),
]
