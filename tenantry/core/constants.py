"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000
SECONDS_PER_MINUTE = 60

# Redaction
REDACTED = "[REDACTED]"

# Generic client-facing message for errors whose detail must stay internal
GENERIC_SERVER_ERROR = "Server Error"
