from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field as PydanticField, field_validator


class ErrorEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    message: str

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps in a hand-edited snapshot are read as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# Layout of the snapshot file: {"errors": [...], "totalRequests": n}
class ErrorLogState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    errors: List[ErrorEvent] = PydanticField(default_factory=list)
    total_requests: int = PydanticField(default=0, ge=0, alias="totalRequests")
