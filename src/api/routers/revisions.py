"""Revision endpoints of a note."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from api.helpers import get_note_or_404
from models.user import User
from schemas.revision import RevisionMetadataResponse, RevisionResponse
from services.exceptions import NotFoundError
from services.revision_service import revision_service

router = APIRouter(prefix="/notes/{note_id_or_alias}/revisions", tags=["revisions"])


@router.get("", response_model=list[RevisionMetadataResponse])
async def list_revisions(
    note_id_or_alias: str,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[RevisionMetadataResponse]:
    """List revision summaries of a note, newest first."""
    note = await get_note_or_404(db, note_id_or_alias)
    revisions = await revision_service.get_all(db, note)
    revisions.sort(key=lambda r: (r.created_at, r.id), reverse=True)
    return [await revision_service.to_summary(db, revision) for revision in revisions]


@router.delete("", response_model=list[RevisionMetadataResponse])
async def purge_revisions(
    note_id_or_alias: str,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[RevisionMetadataResponse]:
    """Delete all revisions of a note except the latest; returns the purged ones."""
    note = await get_note_or_404(db, note_id_or_alias)
    try:
        return await revision_service.purge_with_summaries(db, note)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Revision not found")


@router.get("/latest", response_model=RevisionResponse)
async def get_latest_revision(
    note_id_or_alias: str,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> RevisionResponse:
    """Get the latest revision of a note."""
    note = await get_note_or_404(db, note_id_or_alias)
    try:
        revision = await revision_service.get_latest(db, note)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Revision not found")
    return await revision_service.to_detail(db, revision)


@router.get("/first", response_model=RevisionResponse)
async def get_first_revision(
    note_id_or_alias: str,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> RevisionResponse:
    """Get the first revision of a note."""
    note = await get_note_or_404(db, note_id_or_alias)
    try:
        revision = await revision_service.get_first(db, note)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Revision not found")
    return await revision_service.to_detail(db, revision)


@router.get("/{revision_id}", response_model=RevisionResponse)
async def get_revision(
    note_id_or_alias: str,
    revision_id: int,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> RevisionResponse:
    """Get a revision of a note by ID."""
    note = await get_note_or_404(db, note_id_or_alias)
    try:
        revision = await revision_service.get_by_id(db, note, revision_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Revision not found")
    return await revision_service.to_detail(db, revision)
