"""Edit store: pending edits and the edits folded into a revision."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.author import Author
from models.edit import Edit
from models.note import Note
from models.revision import Revision
from models.user import User
from schemas.revision import EditResponse


async def append_edit(
    db: AsyncSession,
    note: Note,
    author: Author,
    start_pos: int,
    end_pos: int,
) -> Edit:
    """
    Record a finalized edit of a character range as pending.

    Raises:
        ValueError: If the author belongs to another note or the range is inverted.
    """
    if author.note_id != note.id:
        raise ValueError(f"Author {author.id} does not belong to note {note.id}")
    if start_pos < 0 or end_pos < start_pos:
        raise ValueError(f"Invalid edit range [{start_pos}, {end_pos})")

    edit = Edit(
        note_id=note.id,
        author_id=author.id,
        start_pos=start_pos,
        end_pos=end_pos,
    )
    db.add(edit)
    await db.flush()
    await db.refresh(edit)
    return edit


async def get_pending_edits(db: AsyncSession, note: Note) -> list[Edit]:
    """Get edits of a note not yet folded into a revision, oldest first."""
    stmt = (
        select(Edit)
        .where(Edit.note_id == note.id, Edit.revision_id.is_(None))
        .order_by(Edit.created_at, Edit.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_edits_for_revision(db: AsyncSession, revision: Revision) -> list[Edit]:
    """Get the edits folded into a revision, oldest first."""
    stmt = (
        select(Edit)
        .where(Edit.revision_id == revision.id)
        .order_by(Edit.created_at, Edit.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_edit_views(db: AsyncSession, revision: Revision) -> list[EditResponse]:
    """
    Build edit views for a revision.

    Edits by anonymous authors carry username=None; nothing else about the
    author is exposed.
    """
    stmt = (
        select(Edit, User.username)
        .join(Author, Author.id == Edit.author_id)
        .outerjoin(User, User.id == Author.user_id)
        .where(Edit.revision_id == revision.id)
        .order_by(Edit.created_at, Edit.id)
    )
    result = await db.execute(stmt)
    return [
        EditResponse(
            username=username,
            start_pos=edit.start_pos,
            end_pos=edit.end_pos,
            created_at=edit.created_at,
            updated_at=edit.updated_at,
        )
        for edit, username in result.all()
    ]
