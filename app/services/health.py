import time
from datetime import datetime
from typing import Callable, Optional

from app.schemas.health import HealthStatus
from app.services.error_log import ErrorLog

# Recorded at import, which is as close to process start as the app gets
PROCESS_STARTED_AT = time.monotonic()


def format_error_rate(errors: int, total_requests: int) -> str:
    rate = (errors / total_requests) * 100 if total_requests > 0 else 0.0
    return f"{rate:.2f}%"


class HealthReporter:
    def __init__(
        self,
        error_log: ErrorLog,
        monotonic: Callable[[], float] = time.monotonic,
        started_at: Optional[float] = None,
    ):
        self.error_log = error_log
        self._monotonic = monotonic
        self.started_at = PROCESS_STARTED_AT if started_at is None else started_at

    def uptime(self) -> float:
        return self._monotonic() - self.started_at

    def snapshot(self, now: Optional[datetime] = None) -> HealthStatus:
        # The window is applied at read time, so errors that aged out since
        # the last log_error call are not counted.
        recent = self.error_log.recent_errors(now)
        total = self.error_log.total_requests
        return HealthStatus(
            status="OK",
            uptime=self.uptime(),
            totalRequests=total,
            errorsLast24h=len(recent),
            errorRate=format_error_rate(len(recent), total),
        )
