from enum import Enum

from pydantic import BaseModel


class HealthStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


class HealthResponse(BaseModel):
    status: HealthStatus
    message: str
    breaker: str = "closed"

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.OK
