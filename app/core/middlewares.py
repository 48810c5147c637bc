import time

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from app.utils.logging import get_logger


class LogRequestsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        logger = get_logger()
        logger.info(f"Request: {request.method} {request.url}")
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"{response.status_code} in {elapsed_ms:.1f}ms"
        )
        return response
