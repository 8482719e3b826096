"""Type aliases for dynamic data structures throughout the application.

All types defined here should be JSON-serializable to support logging,
API responses, and persistence layers.
"""

from typing import Any

# Decoded JSON object, e.g. an untrusted request body or a response payload
type JsonObject = dict[str, Any]
