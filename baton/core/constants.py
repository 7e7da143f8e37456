"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Security and redaction
REDACTED = "[REDACTED]"
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds

# Status codes the pipeline itself produces
HTTP_200_OK = 200
HTTP_400_BAD_REQUEST = 400
HTTP_422_UNPROCESSABLE_ENTITY = 422
HTTP_500_INTERNAL_SERVER_ERROR = 500

# Opaque body rendered for server faults
INTERNAL_SERVER_ERROR_MESSAGE = "internal server error"
