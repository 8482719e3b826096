"""Masking of secrets in data that is about to be logged.

A key is secret when it looks like one (``password``, ``token``,
``api_key``...) or contains one of the configured
``log_config.sensitive_fields``. Its value is replaced by ``[REDACTED]``,
however deeply it sits inside dicts, lists or tuples. Callers get a copy;
the data they pass in is left alone.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Final

from tenantry.core.config import get_settings
from tenantry.core.constants import REDACTED

SECRET_KEY_PATTERN: Final = re.compile(
    r"passw(or)?d|pwd|secret|token|api[_-]?key|auth|credential"
    r"|private[_-]?key|session|cookie",
    re.IGNORECASE,
)

# Anything nested deeper than this is masked wholesale
MAX_DEPTH: Final = 10

# Attributes every TenantryError carries that never belong in a log line
_SKIPPED_ATTRIBUTES: Final = frozenset({"stack_trace", "cause"})


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> tuple[str, ...]:
    return tuple(name.lower() for name in get_settings().log_config.sensitive_fields)


def is_sensitive_field(field_name: str) -> bool:
    """Whether values stored under ``field_name`` must be masked."""
    if SECRET_KEY_PATTERN.search(field_name):
        return True
    lowered = field_name.lower()
    return any(name in lowered for name in _get_sensitive_fields())


def sanitize_value(value: Any, field_name: str = "", depth: int = 0) -> Any:
    """Mask ``value`` if its key is secret, recursing into containers.

    Args:
        value: Anything; only dicts, lists and tuples are descended into.
        field_name: Key the value was found under, empty for sequence items.
        depth: Nesting level of ``value``.

    Returns:
        Any: A masked copy for containers, ``[REDACTED]`` for secrets, the
            value itself otherwise.
    """
    if depth > MAX_DEPTH or (field_name and is_sensitive_field(field_name)):
        return REDACTED

    depth += 1
    if isinstance(value, dict):
        return {
            key: sanitize_value(item, str(key), depth) for key, item in value.items()
        }
    if isinstance(value, list):
        return [sanitize_value(item, depth=depth) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize_value(item, depth=depth) for item in value)
    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Masked copy of a flat or nested mapping."""
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Describe ``error`` for a log record without leaking secrets.

    The result holds the exception type and message, the masked ``context``
    and, under ``error_attributes``, the exception's own public attributes.
    Tracebacks are left to the logger.
    """
    described: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if context:
        described.update(sanitize_dict(context))

    attributes = {
        name: value
        for name, value in vars(error).items()
        if not name.startswith("_") and name not in _SKIPPED_ATTRIBUTES
    }
    if attributes:
        described["error_attributes"] = sanitize_dict(attributes)
    return described
