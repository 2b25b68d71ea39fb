# =============================================================================
# app/routers/health.py - Health Endpoints
# =============================================================================
#   GET /health        - process is up, with environment and version
#   GET /health/live   - liveness check, no dependency calls
#   GET /health/ready  - Supabase and Redis reachability
#
# Redis only carries realtime events, so a Redis outage reports "degraded"
# rather than "unready".
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.utils import utcnow

router = APIRouter()

API_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str | None = None
    version: str | None = None


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]
    timestamp: str


def _check_supabase() -> str:
    from lib.supabase_client import SupabaseClient

    try:
        SupabaseClient.get_client().table("tasks").select("id").limit(1).execute()
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"
    return "healthy"


def _check_redis() -> str:
    from app.websocket.broadcast import get_redis_client

    try:
        get_redis_client().ping()
    except Exception as e:
        return f"unhealthy: {str(e)[:50]}"
    return "healthy"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        timestamp=utcnow().isoformat(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/live", response_model=HealthResponse)
async def liveness_check():
    return HealthResponse(status="alive", timestamp=utcnow().isoformat())


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """Task table readable and Redis answering PING."""
    checks = {"database": _check_supabase(), "redis": _check_redis()}
    ready = all(result == "healthy" for result in checks.values())

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=checks,
        timestamp=utcnow().isoformat(),
    )
