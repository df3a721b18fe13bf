"""Liveness and readiness checks plus a summary endpoint for humans."""

from fastapi import APIRouter, Request

from learnpath.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    """Ready once the lifespan has wired the services to a Cassandra session.

    Without a session the app still answers, as ``degraded``.
    """
    settings = get_settings()
    connected = getattr(request.app.state, "cassandra_session", None) is not None
    return {
        "status": "ready" if connected else "degraded",
        "database": connected,
        "keyspace": settings.cassandra_keyspace,
        "environment": settings.environment,
        "debug": settings.debug,
    }


@router.get("")
async def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
