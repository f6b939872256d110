from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from skillpath.core.config import settings

PROFILE_HEADER = "x-profile-id"


def profile_or_remote_address(request: Request) -> str:
    """Bucket requests per profile when the caller names one, else per client address."""
    profile_id = (request.headers.get(PROFILE_HEADER) or "").strip()
    if profile_id:
        return f"profile:{profile_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=profile_or_remote_address)


def rate_limit(limit: str | None = None):
    if settings.rate_limit_enabled:
        return limiter.limit(limit or settings.rate_limit)

    def decorator(func):
        return func

    return decorator
