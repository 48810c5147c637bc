from fastapi import APIRouter

from app.core.dependencies import HealthDependency
from app.schemas.health import HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus, summary="Get API health status")
async def health_check(health: HealthDependency):
    return health.snapshot()
