"""Note endpoints: creation, visits and content updates."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from api.helpers import get_note_or_404
from models.note import Note
from models.user import User
from schemas.note import NoteAliasUpdate, NoteContentUpdate, NoteCreate, NoteResponse
from schemas.revision import RevisionMetadataResponse
from services import note_service
from services.exceptions import AliasConflictError, ForbiddenIdentifierError, NotFoundError
from services.history_service import history_service
from services.revision_service import revision_service

router = APIRouter(prefix="/notes", tags=["notes"])


async def _build_note_response(db: AsyncSession, note: Note) -> NoteResponse:
    """Combine a note with its latest content and current alias/tags."""
    try:
        latest = await revision_service.get_latest(db, note)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Revision not found")
    primary_alias = await note_service.get_primary_alias(db, note)
    return NoteResponse(
        identifier=primary_alias or note.public_id,
        public_id=note.public_id,
        primary_alias=primary_alias,
        title=note.title,
        tags=await note_service.get_tag_names(db, note),
        content=latest.content,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


@router.post("/", response_model=NoteResponse, status_code=201)
async def create_note(
    data: NoteCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> NoteResponse:
    """Create a note owned by the current user, with its first revision."""
    try:
        note = await note_service.create_note(
            db,
            content=data.content,
            owner=current_user,
            alias=data.alias,
            title=data.title,
            tags=data.tags,
        )
    except ForbiddenIdentifierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AliasConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await _build_note_response(db, note)


@router.get("/{note_id_or_alias}", response_model=NoteResponse)
async def get_note(
    note_id_or_alias: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> NoteResponse:
    """Get a note with its latest content. Counts as a visit for the history."""
    note = await get_note_or_404(db, note_id_or_alias)
    response = await _build_note_response(db, note)
    await history_service.touch(db, note, current_user)
    return response


@router.put("/{note_id_or_alias}/content", response_model=RevisionMetadataResponse)
async def update_note_content(
    note_id_or_alias: str,
    data: NoteContentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> RevisionMetadataResponse:
    """Replace the content of a note, creating a new revision if it changed."""
    note = await get_note_or_404(db, note_id_or_alias)
    try:
        revision = await note_service.update_content(db, note, current_user, data.content)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Revision not found")
    return await revision_service.to_summary(db, revision)


@router.put("/{note_id_or_alias}/alias", response_model=NoteResponse)
async def rename_note_alias(
    note_id_or_alias: str,
    data: NoteAliasUpdate,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> NoteResponse:
    """Rename the primary alias of a note."""
    note = await get_note_or_404(db, note_id_or_alias)
    try:
        await note_service.rename_primary_alias(db, note, data.alias)
    except ForbiddenIdentifierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AliasConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await _build_note_response(db, note)
