"""Health Routes — liveness and readiness for the persona-graph service.

Invariants:
    - /health/ answers 200 whenever the process serves requests
    - /health/ready answers 503 until the database manager exists and answers a query
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from persona_graph import __version__
from persona_graph.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "persona-graph-api"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}


@router.get("/ready")
async def readiness():
    """Ready once the store is reachable; db_manager is read at call time."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
