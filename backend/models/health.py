from pydantic import BaseModel

class HealthResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str  # ISO-8601, UTC
    version: str
