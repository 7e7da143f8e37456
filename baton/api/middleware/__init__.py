"""Built-in pipeline middleware.

- **request_context**: Correlation IDs for every request
- **request_logging**: Request logging with performance tracking
- **security_headers**: Common security headers on every response

Register them in this order so that request logs carry the correlation ID::

    app.use(security_headers())
    app.use(request_context)
    app.use(request_logging())
"""

from baton.api.middleware.request_context import request_context
from baton.api.middleware.request_logging import request_logging
from baton.api.middleware.security_headers import security_headers

__all__ = ["request_context", "request_logging", "security_headers"]
