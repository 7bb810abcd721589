from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from companygrow.core.config import AUTH_RATE_LIMIT, RATE_LIMIT_ENABLED


def _client_ip(request: Request) -> str:
    # detrás de proxy: primera IP de X-Forwarded-For
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(key_func=_client_ip, enabled=RATE_LIMIT_ENABLED, strategy="fixed-window")

auth_limit = limiter.limit(AUTH_RATE_LIMIT)
