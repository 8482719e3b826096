"""Unit tests for the exceptions module."""

import pytest

from tenantry.core.exceptions import (
    ConflictError,
    DuplicateKeyError,
    ErrorCode,
    NotFoundError,
    Severity,
    StorageError,
    TenantryError,
    ValidationError,
)


@pytest.mark.unit
class TestTenantryError:
    """Behaviour shared by every application error."""

    def test_accepts_enum_or_string_code(self) -> None:
        """Error codes are stored as strings."""
        assert TenantryError(ErrorCode.CONFLICT, "x").error_code == "CONFLICT"
        assert TenantryError("CUSTOM", "x").error_code == "CUSTOM"

    def test_defaults(self) -> None:
        """Severity defaults to MEDIUM and the status to 500."""
        error = TenantryError(ErrorCode.INTERNAL_ERROR, "boom")

        assert error.severity is Severity.MEDIUM
        assert error.status_code == 500
        assert error.context == {}
        assert error.errors == ["boom"]

    def test_str_and_repr(self) -> None:
        """String forms include the code and message."""
        error = TenantryError(ErrorCode.NOT_FOUND, "gone", context={"id": 1})

        assert str(error) == "[NOT_FOUND] gone"
        assert "error_code='NOT_FOUND'" in repr(error)
        assert "context={'id': 1}" in repr(error)

    def test_cause_is_chained(self) -> None:
        """The cause becomes __cause__."""
        cause = RuntimeError("driver")
        error = TenantryError(ErrorCode.INTERNAL_ERROR, "wrapped", cause=cause)

        assert error.cause is cause
        assert error.__cause__ is cause

    def test_fingerprint_is_stable_per_location(self) -> None:
        """Errors raised from the same place share a fingerprint."""
        fingerprints = {
            TenantryError(ErrorCode.INTERNAL_ERROR, f"msg {i}").fingerprint
            for i in range(2)
        }
        first = TenantryError(ErrorCode.INTERNAL_ERROR, "a")

        assert len(fingerprints) == 1
        assert len(first.fingerprint) == 16
        assert first.stack_trace

    @pytest.mark.parametrize(
        ("severity", "expected", "alert"),
        [
            (Severity.LOW, True, False),
            (Severity.MEDIUM, True, False),
            (Severity.HIGH, False, True),
            (Severity.CRITICAL, False, True),
        ],
    )
    def test_expected_and_alert(
        self, severity: Severity, expected: bool, alert: bool
    ) -> None:
        """Severity drives is_expected and should_alert."""
        error = TenantryError(ErrorCode.INTERNAL_ERROR, "x", severity=severity)

        assert error.is_expected is expected
        assert error.should_alert is alert


@pytest.mark.unit
class TestSubclasses:
    """Status codes and messages of the concrete errors."""

    def test_validation_error_carries_all_messages(self) -> None:
        """Every collected message is reported, in order."""
        error = ValidationError(["email is required", "password is required"])

        assert error.status_code == 400
        assert error.errors == ["email is required", "password is required"]
        assert error.message == "Validation failed"
        assert error.severity is Severity.LOW

    def test_validation_errors_are_copied(self) -> None:
        """Mutating the returned list does not change the error."""
        error = ValidationError(["a"])
        error.errors.append("b")

        assert error.errors == ["a"]

    def test_not_found(self) -> None:
        """NotFoundError answers 404 with a generic message."""
        error = NotFoundError()

        assert error.status_code == 404
        assert error.message == "Not Found"

    def test_conflict(self) -> None:
        """ConflictError keeps its fixed domain message."""
        error = ConflictError("Email already registered")

        assert error.status_code == 409
        assert error.errors == ["Email already registered"]

    def test_storage_error_is_generic(self) -> None:
        """StorageError hides the driver error behind a generic message."""
        cause = OSError("connection reset by 10.0.0.5")
        error = StorageError(cause=cause)

        assert error.status_code == 500
        assert "10.0.0.5" not in error.message
        assert error.should_alert is True

    def test_duplicate_key_is_a_storage_error(self) -> None:
        """DuplicateKeyError is a low-severity storage error answering 409."""
        error = DuplicateKeyError("email")

        assert isinstance(error, StorageError)
        assert error.status_code == 409
        assert error.key == "email"
        assert error.context == {"key": "email"}
        assert error.is_expected is True
