# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness, basic health, and a readiness check that touches the two external
# services every initiative write depends on: the programs table and the
# image bucket.
# =============================================================================

from datetime import datetime, timezone
from typing import Callable

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient

router = APIRouter()

API_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class DependencyCheck(BaseModel):
    """Result of checking one external dependency."""
    target: str
    healthy: bool
    error: str | None = None


class ChecksResponse(BaseModel):
    database: DependencyCheck
    storage: DependencyCheck


class ReadinessResponse(BaseModel):
    """Readiness check response. status is "ready" or "degraded"."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Dependency Checks
# =============================================================================

def _check_dependency(target: str, call: Callable[[], object]) -> DependencyCheck:
    try:
        call()
    except Exception as e:
        return DependencyCheck(target=target, healthy=False, error=str(e)[:100])
    return DependencyCheck(target=target, healthy=True)


def _check_database() -> DependencyCheck:
    return _check_dependency(
        "programs",
        lambda: SupabaseClient.get_client().table("programs").select("id").limit(1).execute(),
    )


def _check_storage() -> DependencyCheck:
    return _check_dependency(
        settings.IMAGE_BUCKET,
        lambda: SupabaseClient.get_client().storage.get_bucket(settings.IMAGE_BUCKET),
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Checks the programs table and the initiative image bucket. Each check
    names what it checked and, on failure, a truncated error.
    """
    checks = ChecksResponse(database=_check_database(), storage=_check_storage())
    ready = checks.database.healthy and checks.storage.healthy

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """Returns whether the service process is alive."""
    return LivenessResponse(status="alive", timestamp=_now())
