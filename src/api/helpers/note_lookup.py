"""Resolve a note reference from a path parameter into a Note or an HTTP error."""
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from models.note import Note
from services import note_service
from services.exceptions import ForbiddenIdentifierError, NotFoundError


async def get_note_or_404(db: AsyncSession, note_id_or_alias: str) -> Note:
    """
    Resolve a public id or alias.

    Raises:
        HTTPException: 400 for a reserved identifier, 404 if the note does not exist.
    """
    try:
        return await note_service.resolve_note(db, note_id_or_alias)
    except ForbiddenIdentifierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
