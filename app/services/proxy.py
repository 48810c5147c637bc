import json
import re
from typing import Any, Dict, List, Mapping, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.responses import GENERIC_PROXY_ERROR, send_error
from app.services.error_log import ErrorLog
from app.services.upstream import UpstreamClient
from app.utils.caching import TTLCache
from app.utils.logging import get_logger

PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def route_path(template: str) -> str:
    """``/alpha/:code`` -> ``/alpha/{code}`` for route registration."""
    return PLACEHOLDER.sub(r"{\1}", template)


def resolve_path(template: str, path_params: Mapping[str, Any]) -> str:
    resolved = template
    for name, value in path_params.items():
        resolved = resolved.replace(f":{name}", str(value))
    return resolved


def serialize_query(query_items: List[Tuple[str, str]]) -> str:
    # Insertion order is kept, so ?a=1&b=2 and ?b=2&a=1 are different keys.
    # Repeated keys collapse into a list of their values.
    query: Dict[str, Any] = {}
    for key, value in query_items:
        if key not in query:
            query[key] = value
        elif isinstance(query[key], list):
            query[key].append(value)
        else:
            query[key] = [query[key], value]
    return json.dumps(query, separators=(",", ":"), ensure_ascii=False)


def cache_key(resolved_path: str, query_items: List[Tuple[str, str]]) -> str:
    return f"{resolved_path}{serialize_query(query_items)}"


class CachingProxy:
    """Serves upstream JSON through the TTL cache and records outcomes."""

    def __init__(
        self,
        cache: TTLCache,
        error_log: ErrorLog,
        upstream: UpstreamClient,
        ttl: int,
    ):
        self.cache = cache
        self.error_log = error_log
        self.upstream = upstream
        self.ttl = ttl

    async def handle(self, template: str, request: Request) -> JSONResponse:
        logger = get_logger()
        query_items = list(request.query_params.multi_items())
        self.error_log.increment_request_count()

        try:
            upstream_path = resolve_path(template, request.path_params)
            key = cache_key(upstream_path, query_items)
            logger.debug(f"key: {key}")

            cached = self.cache.get(key)
            if cached is not None:
                logger.info(f"key: {key} CACHE HIT")
                data = cached
            else:
                logger.info(f"key: {key} CACHE MISS")
                data = await self.upstream.get_json(
                    upstream_path, params=query_items or None
                )
                self.cache.set(key, data, self.ttl)
            response = JSONResponse(content=data)
        except Exception as exc:
            logger.warning(f"Proxy request {request.method} {request.url} failed: {exc}")
            self.error_log.log_error(exc)
            return send_error(GENERIC_PROXY_ERROR)

        self.error_log.persist()
        return response
