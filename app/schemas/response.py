from pydantic import BaseModel, Field
from typing import Optional, Any, Dict, Literal

class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None

class HealthResponse(BaseModel):
    """
    Body of the /health probe.

    `checks` holds the active session count and the spreadsheet status.
    """
    status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    timestamp: float
    environment: str
    version: str
    checks: Dict[str, Any] = Field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return 200 if self.status == "healthy" else 503
