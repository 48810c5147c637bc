from fastapi import APIRouter

from app.api.endpoints.countries import router as countries_router
from app.api.endpoints.health import router as health_router

router = APIRouter()
router.include_router(countries_router)
router.include_router(health_router)
