"""Rate limiting configuration."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from rbac_api.config import get_settings


def get_client_key(request: Request) -> str:
    """Key requests by the first X-Forwarded-For hop, else the peer address.

    Args:
        request: The incoming request object.

    Returns:
        The client IP address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip
    return get_remote_address(request)


def _get_storage_uri() -> str | None:
    """Get rate limiter storage URI.

    Returns:
        Redis URI or None for in-memory storage.
    """
    settings = get_settings()
    if settings.redis_url is None:
        return None
    # Separate database index from the response cache
    redis_url = str(settings.redis_url).rstrip("/")
    if redis_url.count("/") == 2:
        return f"{redis_url}/1"
    return redis_url


_settings = get_settings()

limiter = Limiter(
    key_func=get_client_key,
    default_limits=[f"{_settings.rate_limit_default}/minute"],
    storage_uri=_get_storage_uri(),
    enabled=_settings.rate_limit_enabled,
)

API_DEFAULT_LIMIT = f"{_settings.rate_limit_default}/minute"
# Each AI call costs a remote text generation request
AI_COMMAND_LIMIT = f"{_settings.rate_limit_ai}/minute"
