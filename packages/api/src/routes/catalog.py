# This project was developed with assistance from AI tools.
"""Document catalog administration routes."""

from db import get_db
from db.enums import DocumentOwner, UserRole
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import require_roles
from ..schemas.checklist import DocumentMasterCreate, DocumentMasterResponse, DocumentMasterUpdate
from ..services import catalog

router = APIRouter()


@router.get(
    "/",
    response_model=list[DocumentMasterResponse],
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.STAFF))],
)
async def list_catalog(
    session: AsyncSession = Depends(get_db),
    owner_type: DocumentOwner | None = None,
    include_inactive: bool = False,
) -> list[DocumentMasterResponse]:
    entries = await catalog.list_catalog(
        session, owner_type=owner_type, include_inactive=include_inactive,
    )
    return [DocumentMasterResponse.model_validate(e) for e in entries]


@router.post(
    "/",
    response_model=DocumentMasterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def create_entry(
    body: DocumentMasterCreate,
    session: AsyncSession = Depends(get_db),
) -> DocumentMasterResponse:
    entry = await catalog.create_catalog_entry(session, **body.model_dump())
    return DocumentMasterResponse.model_validate(entry)


@router.patch(
    "/{entry_id}",
    response_model=DocumentMasterResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def update_entry(
    entry_id: int,
    body: DocumentMasterUpdate,
    session: AsyncSession = Depends(get_db),
) -> DocumentMasterResponse:
    entry = await catalog.update_catalog_entry(session, entry_id, **body.model_dump(exclude_unset=True))
    return DocumentMasterResponse.model_validate(entry)


@router.delete(
    "/{entry_id}",
    response_model=DocumentMasterResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def deactivate_entry(
    entry_id: int,
    session: AsyncSession = Depends(get_db),
) -> DocumentMasterResponse:
    """Soft-deactivate. Existing checklist items are untouched."""
    entry = await catalog.deactivate_catalog_entry(session, entry_id)
    return DocumentMasterResponse.model_validate(entry)
