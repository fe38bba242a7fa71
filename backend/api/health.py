from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import Response

from api.image_edit import CORS_HEADERS, method_not_allowed
from config.settings import settings
from models.health import HealthResponse

router = APIRouter(tags=["health"])

@router.get("/health", response_model=HealthResponse)
async def api_health_check():
    return HealthResponse(
        message="Server is running!",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=settings.VERSION,
    )

@router.options("/health")
async def health_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)

@router.api_route("/health", methods=["POST", "PUT", "PATCH", "DELETE"])
async def health_method_not_allowed():
    return method_not_allowed()
