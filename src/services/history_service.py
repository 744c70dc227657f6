"""Service layer for per-user note visit history."""
import logging

from sqlalchemy import delete, func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.history_entry import HistoryEntry
from models.note import Note
from models.user import User
from schemas.history import HistoryEntryImport, HistoryEntryResponse, HistoryEntryUpdate
from services import note_service
from services.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class HistoryService:
    """
    Service for the visit history of a user.

    Each (user, note) pair has at most one entry. Entries are created by visits,
    changed by pinning, and removed individually or all at once by their owner.
    Operations take the acting user explicitly; ownership checks happen before
    this layer.
    """

    async def list_for_user(self, db: AsyncSession, user: User) -> list[HistoryEntry]:
        """Get all history entries of a user (no implied order)."""
        stmt = (
            select(HistoryEntry)
            .where(HistoryEntry.user_id == user.id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_entry(self, db: AsyncSession, note: Note, user: User) -> HistoryEntry:
        """
        Get the history entry of a user for a note.

        Raises:
            NotFoundError: If the user has no entry for this note.
        """
        stmt = (
            select(HistoryEntry)
            .where(HistoryEntry.user_id == user.id, HistoryEntry.note_id == note.id)
            .execution_options(populate_existing=True)
        )
        entry = (await db.execute(stmt)).scalar_one_or_none()
        if entry is None:
            raise NotFoundError("History entry for note", note.public_id)
        return entry

    async def touch(self, db: AsyncSession, note: Note, user: User) -> HistoryEntry:
        """
        Record a visit of a note.

        Single-statement upsert on the (user_id, note_id) primary key: a new entry
        starts unpinned, an existing one only gets its last-visited time refreshed.
        Concurrent visits therefore converge to one row.
        """
        stmt = (
            pg_insert(HistoryEntry)
            .values(user_id=user.id, note_id=note.id, pin_status=False)
            .on_conflict_do_update(
                index_elements=[HistoryEntry.user_id, HistoryEntry.note_id],
                set_={"updated_at": func.clock_timestamp()},
            )
            .returning(HistoryEntry)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one()

    async def update(
        self,
        db: AsyncSession,
        note: Note,
        user: User,
        data: HistoryEntryUpdate,
    ) -> HistoryEntry:
        """
        Partially update an existing history entry.

        Only fields explicitly set to a value in data are applied. The
        last-visited time is not changed by pinning.

        Raises:
            NotFoundError: If the user has no entry for this note. No entry is created.
        """
        entry = await self.get_entry(db, note, user)
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(entry, field, value)
        await db.flush()
        return entry

    async def delete(self, db: AsyncSession, note: Note, user: User) -> None:
        """
        Delete the history entry of a user for a note.

        Raises:
            NotFoundError: If the user has no entry for this note.
        """
        entry = await self.get_entry(db, note, user)
        await db.delete(entry)
        await db.flush()

    async def delete_all(self, db: AsyncSession, user: User) -> int:
        """
        Delete the whole history of a user. Deleting an empty history is a no-op.

        Returns:
            Number of deleted entries.
        """
        result = await db.execute(
            delete(HistoryEntry)
            .where(HistoryEntry.user_id == user.id)
            .execution_options(synchronize_session=False),
        )
        logger.info("Deleted %d history entries of user %s", result.rowcount, user.username)
        return result.rowcount

    async def import_all(
        self,
        db: AsyncSession,
        user: User,
        entries: list[HistoryEntryImport],
    ) -> None:
        """
        Replace the whole history of a user.

        Every note reference is resolved before anything is written, so a bad
        reference aborts the replacement with the previous history intact. The
        delete and the bulk insert then run in one savepoint. When several
        entries reference the same note, the last one wins.

        Raises:
            ForbiddenIdentifierError: If a reference is a reserved identifier.
            NotFoundError: If a reference does not resolve to a note.
        """
        rows: dict[int, dict] = {}
        for item in entries:
            note = await note_service.resolve_note(db, item.note)
            rows[note.id] = {
                "user_id": user.id,
                "note_id": note.id,
                "pin_status": item.pin_status,
                "updated_at": item.last_visited_at,
            }

        async with db.begin_nested():
            await db.execute(
                delete(HistoryEntry)
                .where(HistoryEntry.user_id == user.id)
                .execution_options(synchronize_session=False),
            )
            if rows:
                await db.execute(insert(HistoryEntry), list(rows.values()))

        logger.info("Replaced history of user %s with %d entries", user.username, len(rows))

    async def to_view(self, db: AsyncSession, entry: HistoryEntry) -> HistoryEntryResponse:
        """
        Build the view of a history entry.

        Identifier, title and tags are read from the note now, so alias renames
        and retagging show up without touching the entry.
        """
        note = await note_service.get_note_by_id(db, entry.note_id)
        return HistoryEntryResponse(
            identifier=await note_service.get_identifier(db, note),
            title=note.title,
            tags=await note_service.get_tag_names(db, note),
            pin_status=entry.pin_status,
            last_visited_at=entry.updated_at,
        )


# Singleton instance for use throughout the application
history_service = HistoryService()
