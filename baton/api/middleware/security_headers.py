"""Security headers middleware for adding common security headers to responses."""

from baton.core.constants import DEFAULT_HSTS_MAX_AGE
from baton.core.types import Middleware
from baton.pipeline.context import Context


def _build_hsts_header(max_age: int, *, include_subdomains: bool, preload: bool) -> str:
    """Build the Strict-Transport-Security header value.

    Returns:
        str: The HSTS header value string.
    """
    parts = [f"max-age={max_age}"]
    if include_subdomains:
        parts.append("includeSubDomains")
    if preload:
        parts.append("preload")
    return "; ".join(parts)


def security_headers(
    *,
    hsts_enabled: bool = True,
    hsts_max_age: int = DEFAULT_HSTS_MAX_AGE,
    hsts_include_subdomains: bool = True,
    hsts_preload: bool = False,
) -> Middleware:
    """Build a middleware adding security headers to every response.

    The headers are set before the rest of the pipeline runs, so error
    responses carry them as well:

    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - X-XSS-Protection: 1; mode=block
    - Strict-Transport-Security (if HSTS is enabled)

    Args:
        hsts_enabled: Whether to include the HSTS header.
        hsts_max_age: Max age for HSTS in seconds (defaults to 1 year).
        hsts_include_subdomains: Whether to include subdomains in HSTS.
        hsts_preload: Whether to include the preload directive.

    Returns:
        Middleware: The security headers middleware.
    """
    hsts = (
        _build_hsts_header(
            hsts_max_age,
            include_subdomains=hsts_include_subdomains,
            preload=hsts_preload,
        )
        if hsts_enabled
        else None
    )

    def middleware(ctx: Context) -> None:
        headers = ctx.writer.headers
        headers["X-Content-Type-Options"] = "nosniff"
        headers["X-Frame-Options"] = "DENY"
        headers["X-XSS-Protection"] = "1; mode=block"
        if hsts is not None:
            headers["Strict-Transport-Security"] = hsts
        ctx.next()

    return middleware
