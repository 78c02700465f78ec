"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse

from src.core.database import Database


router = APIRouter(prefix="/api/health", tags=["health"])


async def _database_ok(request: Request) -> bool:
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        return False
    return await database.ping()


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> ORJSONResponse:
    """Readiness probe - 503 until the database answers."""
    if not await _database_ok(request):
        return ORJSONResponse(
            status_code=503,
            content={"status": "unavailable", "database": "unavailable"},
        )
    return ORJSONResponse(content={"status": "ready", "database": "ok"})


@router.get("")
async def health(request: Request) -> dict[str, str]:
    """General health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "database": "ok" if await _database_ok(request) else "unavailable",
    }
