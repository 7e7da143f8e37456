"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Context store keys set by the built-in middleware
CORRELATION_ID_KEY = "correlation_id"
REQUEST_ID_KEY = "request_id"

# Request handling
MAX_USER_AGENT_LENGTH = 200
