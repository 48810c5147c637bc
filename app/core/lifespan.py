from contextlib import asynccontextmanager
from fastapi import FastAPI
from app.utils.logging import get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger = get_logger()
    app.state.error_log.initialize()
    logger.info(f"Startup: {app.title} v{app.version} starting...")
    logger.info(f"Swagger documentation available at {app.docs_url}")
    yield
    # Shutdown
    logger.info(f"Shutdown: cache stats {app.state.cache.stats()}")
    await app.state.upstream.aclose()
    app.state.cache.clear()
    logger.info("Shutdown: App shutting down...")
