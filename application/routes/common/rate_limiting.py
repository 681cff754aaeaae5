"""
Rate limiting utilities for route handlers.

Provides standardized rate limit key functions.
"""

from quart import request


async def default_rate_limit_key() -> str:
    """
    Generate rate limit key based on client IP address.

    Returns:
        str: Client IP address or "unknown" if not available

    Example:
        >>> @rate_limit(100, timedelta(minutes=15), key_function=default_rate_limit_key)
        >>> async def upload_files():
        >>>     pass
    """
    return request.remote_addr or "unknown"
