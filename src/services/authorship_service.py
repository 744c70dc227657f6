"""
Authorship resolution for revisions.

Authors are reached through the edits of a revision and are never stored on the
revision itself. Each resolved author is either a LinkedAuthor (carrying the
registered user's username) or an AnonymousAuthor (carrying only the author id,
which is never serialized). Callers must branch on the type, so there is no
nullable user field to dereference by accident.
"""
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.author import Author
from models.edit import Edit
from models.note import Note
from models.revision import Revision
from models.user import User
from services.exceptions import NotFoundError


@dataclass(frozen=True)
class LinkedAuthor:
    """Author linked to a registered user."""

    author_id: int
    user_id: int
    username: str


@dataclass(frozen=True)
class AnonymousAuthor:
    """Author with no registered user. Only ever counted, never shown."""

    author_id: int


ResolvedAuthor = LinkedAuthor | AnonymousAuthor


async def resolve_authors(db: AsyncSession, revision: Revision) -> list[ResolvedAuthor]:
    """
    Collect the distinct authors of all edits folded into a revision.

    Authors are deduplicated by author id, not by user: two anonymous authors
    stay two authors. Order follows the first edit of each author.
    """
    stmt = (
        select(Author.id, User.id, User.username)
        .join(Edit, Edit.author_id == Author.id)
        .outerjoin(User, User.id == Author.user_id)
        .where(Edit.revision_id == revision.id)
        .order_by(Edit.created_at, Edit.id)
    )
    result = await db.execute(stmt)

    authors: list[ResolvedAuthor] = []
    seen: set[int] = set()
    for author_id, user_id, username in result.all():
        if author_id in seen:
            continue
        seen.add(author_id)
        if user_id is None:
            authors.append(AnonymousAuthor(author_id=author_id))
        else:
            authors.append(LinkedAuthor(author_id=author_id, user_id=user_id, username=username))
    return authors


def usernames_of(authors: list[ResolvedAuthor]) -> list[str]:
    """Usernames of linked authors, in resolution order. Anonymous authors are dropped."""
    return [author.username for author in authors if isinstance(author, LinkedAuthor)]


def anonymous_count_of(authors: list[ResolvedAuthor]) -> int:
    """Number of anonymous authors."""
    return sum(1 for author in authors if isinstance(author, AnonymousAuthor))


async def resolve_usernames(db: AsyncSession, revision: Revision) -> list[str]:
    """Usernames of the registered users who contributed to a revision."""
    return usernames_of(await resolve_authors(db, revision))


async def count_anonymous(db: AsyncSession, revision: Revision) -> int:
    """Number of anonymous authors who contributed to a revision."""
    return anonymous_count_of(await resolve_authors(db, revision))


async def get_author(db: AsyncSession, author_id: int) -> Author:
    """
    Get an author by ID.

    Raises:
        NotFoundError: If the author does not exist.
    """
    result = await db.execute(select(Author).where(Author.id == author_id))
    author = result.scalar_one_or_none()
    if author is None:
        raise NotFoundError("Author", author_id)
    return author


async def get_or_create_author(db: AsyncSession, note: Note, user: User | None) -> Author:
    """
    Get the author identity of a user on a note, creating it on first contribution.

    Registered users have one author per note (enforced by a partial unique index;
    a concurrent insert that loses the race fetches the winner). Every call with
    user=None creates a new anonymous author.
    """
    if user is None:
        author = Author(note_id=note.id, user_id=None)
        db.add(author)
        await db.flush()
        return author

    stmt = select(Author).where(Author.note_id == note.id, Author.user_id == user.id)
    author = (await db.execute(stmt)).scalar_one_or_none()
    if author is not None:
        return author

    author = Author(note_id=note.id, user_id=user.id)
    try:
        async with db.begin_nested():
            db.add(author)
            await db.flush()
    except IntegrityError:
        author = (await db.execute(stmt)).scalar_one()
    return author
