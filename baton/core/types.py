"""Type aliases for the callables a Baton application is assembled from.

These aliases give names to the seams of the pipeline so that signatures in
the application, group and context modules read as intent rather than as
nested ``Callable`` expressions.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from baton.pipeline.context import Context
    from baton.pipeline.responses import Response

# Terminal handler of a route
type Handler = Callable[["Context"], "Response"]

# Pipeline middleware; calls ctx.next() to continue the chain
type Middleware = Callable[["Context"], None]

# Validator run on every bound record; raises ValueError to reject it
type Validator = Callable[[Any], None]

# Renders an abort cause or unexpected error into a response
type ErrorRenderer = Callable[["Context", BaseException], "Response"]
