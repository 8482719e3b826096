"""Whole-object validation against a set of field constraints."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import TypeAdapter

from tenantry.domain.validation.fields import (
    MISSING,
    CompareField,
    FieldConstraint,
    FieldError,
)

_definition_adapter: TypeAdapter[dict[str, FieldConstraint]] = TypeAdapter(
    dict[str, FieldConstraint]
)


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of validating one input object.

    Attributes:
        validated: Values of the fields that passed, as given.
        errors: One message per failing field, in field declaration order.
    """

    validated: Mapping[str, Any] = field(default_factory=dict)
    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        """Whether every field passed."""
        return not self.errors


class Schema:
    """An immutable, ordered set of named field constraints.

    Validation runs in two phases: every plain field first, then every
    ``compare`` field against the values accepted in the first phase. A
    compare field therefore never depends on declaration order.

    Input keys that are not declared are ignored.

    Args:
        fields: Field name to constraint, in report order.
        name: Schema name used in logs.

    Raises:
        ValueError: If a compare field targets an undeclared field or
            another compare field.
    """

    def __init__(
        self, fields: Mapping[str, FieldConstraint], *, name: str = "schema"
    ) -> None:
        self.name = name
        self._fields: Mapping[str, FieldConstraint] = MappingProxyType(dict(fields))

        for field_name, constraint in self._fields.items():
            if not isinstance(constraint, CompareField):
                continue
            target = self._fields.get(constraint.compare_to)
            if target is None:
                msg = (
                    f"{field_name} compares to undeclared field "
                    f"{constraint.compare_to!r}"
                )
                raise ValueError(msg)
            if isinstance(target, CompareField):
                msg = f"{field_name} cannot compare to another compare field"
                raise ValueError(msg)

    @classmethod
    def from_definition(cls, name: str, definition: Mapping[str, Any]) -> "Schema":
        """Build a schema from plain data such as parsed JSON or YAML.

        Args:
            name: Schema name.
            definition: Field name to a mapping with a ``kind`` key.

        Returns:
            Schema: The constructed schema.

        Raises:
            pydantic.ValidationError: If a field definition is malformed.
        """
        return cls(_definition_adapter.validate_python(dict(definition)), name=name)

    @property
    def fields(self) -> Mapping[str, FieldConstraint]:
        """Read-only view of the declared fields."""
        return self._fields

    def validate(self, data: Mapping[str, Any]) -> ValidationOutcome:
        """Validate every declared field of ``data``, collecting all errors.

        Args:
            data: The untrusted input object.

        Returns:
            ValidationOutcome: Accepted values and error messages.

        Raises:
            TypeError: If ``data`` is not a mapping.
        """
        if not isinstance(data, Mapping):
            msg = f"{self.name} expects a mapping, got {type(data).__name__}"
            raise TypeError(msg)

        validated: dict[str, Any] = {}
        errors: dict[str, str] = {}

        # Compare fields sort last so their targets are already validated
        ordered_fields = sorted(
            self._fields.items(), key=lambda item: isinstance(item[1], CompareField)
        )

        for field_name, constraint in ordered_fields:
            try:
                value = constraint.validate_value(
                    field_name, data.get(field_name, MISSING), validated
                )
            except FieldError as exc:
                errors[field_name] = exc.message
                continue
            if value is not MISSING:
                validated[field_name] = value

        # Report in declaration order, not phase order
        ordered = tuple(errors[n] for n in self._fields if n in errors)
        return ValidationOutcome(
            validated={n: validated[n] for n in self._fields if n in validated},
            errors=ordered,
        )

    def __repr__(self) -> str:
        return f"Schema(name={self.name!r}, fields={list(self._fields)})"
