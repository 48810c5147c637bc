from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.router import router as api_router
from app.core.config import Settings, settings as default_settings
from app.core.exceptions.handlers import register_exception_handlers
from app.core.lifespan import lifespan
from app.core.logging import setup_early_logging
from app.core.middlewares import LogRequestsMiddleware
from app.core.openapi import custom_openapi
from app.core.rate_limiting import setup_rate_limiting
from app.services.error_log import ErrorLog
from app.services.health import HealthReporter
from app.services.proxy import CachingProxy
from app.services.upstream import UpstreamClient
from app.utils.caching import TTLCache
from app.utils.logging import get_logger

# Setup early logging for startup errors
startup_logger = setup_early_logging()


def create_app(
    settings: Optional[Settings] = None,
    *,
    cache: Optional[TTLCache] = None,
    error_log: Optional[ErrorLog] = None,
    upstream: Optional[UpstreamClient] = None,
) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.PROJECT_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/api-docs",
        redoc_url=None,
        openapi_tags=[
            {"name": "Countries", "description": "Cached restcountries.com lookups"},
            {"name": "Health", "description": "Service health and error rate"},
        ],
    )

    # Owned state, shared by every request handler of this app
    app.state.cache = TTLCache(settings.CACHE_TTL) if cache is None else cache
    app.state.error_log = (
        ErrorLog(settings.ERROR_LOG_PATH) if error_log is None else error_log
    )
    if upstream is None:
        upstream = UpstreamClient(
            settings.UPSTREAM_BASE_URL, timeout=settings.UPSTREAM_TIMEOUT
        )
    app.state.upstream = upstream
    app.state.proxy = CachingProxy(
        app.state.cache, app.state.error_log, app.state.upstream, settings.CACHE_TTL
    )
    app.state.health = HealthReporter(app.state.error_log)

    # Customize OpenAPI schema
    app.openapi = lambda: custom_openapi(app)

    # Setup rate limiting if enabled
    setup_rate_limiting(app, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add logging middleware
    app.add_middleware(LogRequestsMiddleware)

    # Register all exception handlers
    register_exception_handlers(app)

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    try:
        get_logger().info(
            f"REST Countries API listening at http://localhost:{default_settings.PORT}"
        )
        uvicorn.run(app, host="0.0.0.0", port=default_settings.PORT)
    except Exception:
        startup_logger.exception("Server failed to start")
        raise
