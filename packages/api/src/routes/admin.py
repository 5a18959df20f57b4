# This project was developed with assistance from AI tools.
"""Admin endpoints: reference data seeding and stage expectations."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import require_roles
from ..schemas.admin import SeedResponse
from ..schemas.case import StageExpectationResponse
from ..services.expectations import list_stage_expectations
from ..services.seed.seeder import seed_reference_data

router = APIRouter()


@router.post(
    "/seed",
    response_model=SeedResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def seed_data(
    session: AsyncSession = Depends(get_db),
) -> SeedResponse:
    """Insert any missing catalog entries, reminder rules and stage expectations."""
    result = await seed_reference_data(session)
    return SeedResponse(**result)


@router.get(
    "/stage-expectations",
    response_model=list[StageExpectationResponse],
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.STAFF))],
)
async def stage_expectations(
    session: AsyncSession = Depends(get_db),
) -> list[StageExpectationResponse]:
    rows = await list_stage_expectations(session)
    return [StageExpectationResponse.model_validate(r) for r in rows]
