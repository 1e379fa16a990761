"""Rate limiting for the generation endpoints using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request


def user_or_address(request: Request) -> str:
    """Key generation calls by caller id when present, else by client address."""
    user_id = request.headers.get("X-User-Id", "").strip()
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=user_or_address)
