"""History API endpoints for the current user's visited notes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from api.helpers import get_note_or_404
from models.user import User
from schemas.history import HistoryEntryResponse, HistoryEntryUpdate, HistoryImportRequest
from services.exceptions import ForbiddenIdentifierError, NotFoundError
from services.history_service import history_service

router = APIRouter(prefix="/me/history", tags=["history"])


@router.get("", response_model=list[HistoryEntryResponse])
async def get_history(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[HistoryEntryResponse]:
    """List the current user's history entries."""
    entries = await history_service.list_for_user(db, current_user)
    return [await history_service.to_view(db, entry) for entry in entries]


@router.post("", status_code=204)
async def set_history(
    data: HistoryImportRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """
    Replace the current user's history.

    All-or-nothing: a reserved note identifier yields 400, an unknown note 404,
    and in both cases the previous history is kept.
    """
    try:
        await history_service.import_all(db, current_user, data.history)
    except ForbiddenIdentifierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("", status_code=204)
async def delete_history(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete the current user's whole history."""
    await history_service.delete_all(db, current_user)


@router.put("/{note_id_or_alias}", response_model=HistoryEntryResponse)
async def update_history_entry(
    note_id_or_alias: str,
    data: HistoryEntryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> HistoryEntryResponse:
    """Update (pin or unpin) a history entry. Does not create missing entries."""
    note = await get_note_or_404(db, note_id_or_alias)
    try:
        entry = await history_service.update(db, note, current_user, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="History entry not found")
    return await history_service.to_view(db, entry)


@router.delete("/{note_id_or_alias}", status_code=204)
async def delete_history_entry(
    note_id_or_alias: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a single history entry."""
    note = await get_note_or_404(db, note_id_or_alias)
    try:
        await history_service.delete(db, note, current_user)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="History entry not found")
