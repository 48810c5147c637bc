from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str = "OK"
    uptime: float  # seconds since the process started
    totalRequests: int
    errorsLast24h: int
    errorRate: str  # e.g. "12.50%"
