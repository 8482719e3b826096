"""API-related constants."""

# HTTP Status Codes
HTTP_500_INTERNAL_SERVER_ERROR = 500
HTTP_400_BAD_REQUEST = 400

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Error bodies
NOT_FOUND_MESSAGE = "Not Found"

# Metrics key path of requests that matched no route
UNMATCHED_ROUTE = "<unmatched>"
