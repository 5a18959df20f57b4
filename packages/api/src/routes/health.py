# This project was developed with assistance from AI tools.
"""Liveness and database health."""

from db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends

from .. import __version__
from ..schemas.admin import HealthResponse

router = APIRouter()


@router.get("/", response_model=list[HealthResponse])
async def health(
    db_service: DatabaseService = Depends(get_db_service),
) -> list[HealthResponse]:
    """Report API and database status. Always 200; inspect each item."""
    db_ok = await db_service.health_check()
    return [
        HealthResponse(
            name="API",
            status="healthy",
            message="Education loan workflow API is running",
            version=__version__,
        ),
        HealthResponse(
            name="Database",
            status="healthy" if db_ok else "unhealthy",
            message="PostgreSQL reachable" if db_ok else "PostgreSQL unreachable",
        ),
    ]
