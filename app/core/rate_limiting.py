from fastapi import Request, status
from limits import parse_many
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.responses import send_error
from app.utils.logging import get_logger


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies one limit string to every request, keyed by client address.

    Checked here rather than per route, so included routers are covered too.
    """

    def __init__(self, app, limiter: Limiter, limit: str):
        super().__init__(app)
        self.limiter = limiter
        self.limits = parse_many(limit)

    async def dispatch(self, request: Request, call_next):
        if self.limiter.enabled:
            client = get_remote_address(request)
            for item in self.limits:
                if not self.limiter.limiter.hit(item, client):
                    get_logger().warning(
                        f"Rate limit {item} exceeded for {client}: "
                        f"{request.method} {request.url}"
                    )
                    return send_error(
                        message="Too many requests.",
                        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    )
        return await call_next(request)


def setup_rate_limiting(app, settings):
    """Per-client request limit; off unless RATE_LIMIT_ENABLED is set."""
    if not settings.RATE_LIMIT_ENABLED:
        return None
    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter
    app.add_middleware(RateLimitMiddleware, limiter=limiter, limit=settings.RATE_LIMIT)
    return limiter
