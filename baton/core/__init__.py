"""Core infrastructure package for shared functionality.

- **config**: Centralized configuration management with environment support
- **exceptions**: Abort signal and binding errors
- **logging**: Structured logging with Loguru
- **sanitize**: Redaction of sensitive values in logs
- **types**: Type aliases for handlers, middleware and hooks
"""
