"""Application errors.

Each error knows the HTTP status it maps to, a stable ``error_code`` for
machines, a ``message`` that is safe to show to clients and a
:class:`Severity` that decides how loudly it is logged. Driver and library
exceptions are wrapped, never shown: the original travels as ``cause``.

Errors also get a short ``fingerprint`` derived from their type and the
``tenantry`` frames that raised them, so repeats of one failure can be
grouped in the log.
"""

import hashlib
import traceback
from collections.abc import Sequence
from enum import Enum
from typing import Any, ClassVar

# Innermost frames considered when fingerprinting
FINGERPRINT_FRAMES = 5


class ErrorCode(Enum):
    """Values of ``error_code`` raised by the application itself."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    STORAGE_ERROR = "STORAGE_ERROR"


class Severity(Enum):
    """How bad an error is.

    LOW errors are the client's fault, MEDIUM ones break a single operation,
    HIGH and CRITICAL ones mean the service itself is degraded and someone
    should be paged.
    """

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TenantryError(Exception):
    """Root of the application's errors.

    Args:
        error_code: An :class:`ErrorCode` or any custom code string.
        message: Text that may be shown to clients.
        severity: Defaults to MEDIUM.
        context: Extra facts for the log, sanitized before it is written.
        cause: Exception being wrapped; also set as ``__cause__``.
    """

    status_code: ClassVar[int] = 500

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        if isinstance(error_code, ErrorCode):
            error_code = error_code.value
        self.error_code = error_code
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause
        # Everything above this constructor
        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._fingerprint()

        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def _fingerprint(self) -> str:
        parts = [type(self).__name__, self.error_code]
        for frame in self.stack_trace[-FINGERPRINT_FRAMES:]:
            location = frame.strip().splitlines()[0]
            if "tenantry/" in location and "site-packages" not in location:
                parts.append(location)
        return hashlib.sha256(":".join(parts).encode()).hexdigest()[:16]

    @property
    def errors(self) -> list[str]:
        """Messages for the ``errors`` list of the response envelope."""
        return [self.message]

    @property
    def is_expected(self) -> bool:
        return self.severity in {Severity.LOW, Severity.MEDIUM}

    @property
    def should_alert(self) -> bool:
        return self.severity in {Severity.HIGH, Severity.CRITICAL}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        extra = f", context={self.context}" if self.context else ""
        return (
            f"{type(self).__name__}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{extra})"
        )


class ValidationError(TenantryError):
    """Input was rejected. Carries every problem found, in report order."""

    status_code: ClassVar[int] = 400

    def __init__(
        self,
        errors: Sequence[str],
        message: str = "Validation failed",
        context: dict[str, Any] | None = None,
    ) -> None:
        self._errors = list(errors)
        super().__init__(ErrorCode.VALIDATION_ERROR, message, Severity.LOW, context)

    @property
    def errors(self) -> list[str]:
        return list(self._errors)


class NotFoundError(TenantryError):
    """Unknown route, or a host that is not one of our tenants."""

    status_code: ClassVar[int] = 404

    def __init__(
        self,
        message: str = "Not Found",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.NOT_FOUND, message, Severity.LOW, context, cause)


class ConflictError(TenantryError):
    """The request collides with stored data, e.g. a taken email."""

    status_code: ClassVar[int] = 409

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.CONFLICT, message, Severity.LOW, context, cause)


class StorageError(TenantryError):
    """A user store failed. Clients see only the generic ``message``."""

    status_code: ClassVar[int] = 500

    def __init__(
        self,
        message: str = "Storage operation failed",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.STORAGE_ERROR, message, Severity.HIGH, context, cause
        )


class DuplicateKeyError(StorageError):
    """A store refused a record because ``key`` must be unique.

    Stores raise it; the registration workflow turns it into a
    :class:`ConflictError` with a domain message.
    """

    status_code: ClassVar[int] = 409

    def __init__(self, key: str, cause: Exception | None = None) -> None:
        self.key = key
        super().__init__(f"Duplicate value for {key}", {"key": key}, cause)
        self.severity = Severity.LOW
