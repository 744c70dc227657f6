"""
Note directory: resolution of note references and note-level operations.

Notes are referenced by public id or alias. A small set of identifiers is
reserved (see Settings.forbidden_note_ids); referencing one of them is a client
error distinct from a reference that simply does not resolve.
"""
import logging
import re
import secrets

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from models.note import Alias, Note
from models.revision import Revision
from models.tag import Tag, note_tags
from models.user import User
from services import authorship_service, edit_service
from services.exceptions import AliasConflictError, ForbiddenIdentifierError, NotFoundError
from services.revision_service import revision_service

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)


def is_forbidden_identifier(identifier: str, settings: Settings | None = None) -> bool:
    """Check whether an identifier is reserved and may not address a note."""
    settings = settings or get_settings()
    return identifier in settings.forbidden_note_ids


def extract_title(content: str) -> str:
    """Title from the first level-one markdown heading, or '' if there is none."""
    match = HEADING_PATTERN.search(content)
    return match.group(1) if match else ""


async def resolve_note(
    db: AsyncSession,
    id_or_alias: str,
    settings: Settings | None = None,
) -> Note:
    """
    Resolve a public id or alias to a note.

    Raises:
        ForbiddenIdentifierError: If the identifier is reserved.
        NotFoundError: If no note has this public id or alias.
    """
    if is_forbidden_identifier(id_or_alias, settings):
        raise ForbiddenIdentifierError(id_or_alias)

    stmt = select(Note).where(Note.public_id == id_or_alias)
    note = (await db.execute(stmt)).scalar_one_or_none()
    if note is None:
        stmt = select(Note).join(Alias, Alias.note_id == Note.id).where(Alias.name == id_or_alias)
        note = (await db.execute(stmt)).scalar_one_or_none()
    if note is None:
        raise NotFoundError("Note", id_or_alias)
    return note


async def get_note_by_id(db: AsyncSession, note_id: int) -> Note:
    """
    Get a note by internal ID.

    Raises:
        NotFoundError: If the note does not exist.
    """
    note = (await db.execute(select(Note).where(Note.id == note_id))).scalar_one_or_none()
    if note is None:
        raise NotFoundError("Note", note_id)
    return note


async def get_primary_alias(db: AsyncSession, note: Note) -> str | None:
    """Current primary alias of a note, if any."""
    stmt = select(Alias.name).where(Alias.note_id == note.id, Alias.is_primary.is_(True))
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_identifier(db: AsyncSession, note: Note) -> str:
    """Identifier shown to users: the primary alias, falling back to the public id."""
    return await get_primary_alias(db, note) or note.public_id


async def get_tag_names(db: AsyncSession, note: Note) -> list[str]:
    """Tag names of a note, sorted alphabetically."""
    stmt = (
        select(Tag.name)
        .join(note_tags, note_tags.c.tag_id == Tag.id)
        .where(note_tags.c.note_id == note.id)
        .order_by(Tag.name)
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_or_create_tags(db: AsyncSession, tag_names: list[str]) -> list[Tag]:
    """Get existing tags or create new ones (names must already be normalized)."""
    if not tag_names:
        return []

    result = await db.execute(select(Tag).where(Tag.name.in_(tag_names)))
    existing_tags = {tag.name: tag for tag in result.scalars()}

    tags = []
    for name in tag_names:
        if name in existing_tags:
            tags.append(existing_tags[name])
        else:
            new_tag = Tag(name=name)
            db.add(new_tag)
            tags.append(new_tag)

    await db.flush()
    return tags


async def _check_alias_available(db: AsyncSession, alias: str, settings: Settings) -> None:
    """
    Raise if an alias is reserved or already addresses a note.

    Raises:
        ForbiddenIdentifierError: If the alias is reserved.
        AliasConflictError: If the alias or a public id with this value exists.
    """
    if is_forbidden_identifier(alias, settings):
        raise ForbiddenIdentifierError(alias)
    stmt = (
        select(Note.id)
        .outerjoin(Alias, Alias.note_id == Note.id)
        .where(or_(Note.public_id == alias, Alias.name == alias))
        .limit(1)
    )
    if (await db.execute(stmt)).scalar_one_or_none() is not None:
        raise AliasConflictError(alias)


async def create_note(
    db: AsyncSession,
    content: str,
    owner: User | None,
    alias: str | None = None,
    title: str | None = None,
    tags: list[str] | None = None,
    settings: Settings | None = None,
) -> Note:
    """
    Create a note with its first revision.

    The initial content is attributed to the owner (or to a fresh anonymous
    author when there is no owner) through a single edit covering the whole text.

    Raises:
        ForbiddenIdentifierError: If the alias is reserved.
        AliasConflictError: If the alias is already taken.
    """
    settings = settings or get_settings()
    if alias is not None:
        await _check_alias_available(db, alias, settings)

    note = Note(
        public_id=secrets.token_hex(16),
        title=title if title is not None else extract_title(content),
        owner_id=owner.id if owner else None,
    )
    note.tag_objects = await get_or_create_tags(db, tags or [])
    if alias is not None:
        note.aliases = [Alias(name=alias, is_primary=True)]
    db.add(note)
    await db.flush()

    author = await authorship_service.get_or_create_author(db, note, owner)
    await edit_service.append_edit(db, note, author, 0, len(content))
    await revision_service.create(db, note, content)
    await db.refresh(note)

    logger.info("Created note %s (alias=%s)", note.public_id, alias)
    return note


def _changed_range(previous: str, content: str) -> tuple[int, int]:
    """Range of content that differs from previous (common prefix and suffix stripped)."""
    prefix = 0
    max_prefix = min(len(previous), len(content))
    while prefix < max_prefix and previous[prefix] == content[prefix]:
        prefix += 1
    suffix = 0
    max_suffix = max_prefix - prefix
    while suffix < max_suffix and previous[-1 - suffix] == content[-1 - suffix]:
        suffix += 1
    return prefix, len(content) - suffix


async def update_content(
    db: AsyncSession,
    note: Note,
    user: User | None,
    content: str,
) -> Revision:
    """
    Replace the content of a note.

    Records one edit covering the changed range, attributed to the user's author
    identity on this note, and folds all pending edits into a new revision.
    Unchanged content does not create a revision.

    The note lock is taken before the latest revision is read, so a concurrent
    update is compared against the revision it will actually follow.

    Raises:
        NotFoundError: If the note has no revision yet.
    """
    await revision_service.lock_note(db, note)
    latest = await revision_service.get_latest(db, note)
    if latest.content == content:
        return latest

    start_pos, end_pos = _changed_range(latest.content, content)
    author = await authorship_service.get_or_create_author(db, note, user)
    await edit_service.append_edit(db, note, author, start_pos, end_pos)
    revision = await revision_service.create(db, note, content)

    note.updated_at = func.clock_timestamp()
    await db.flush()
    await db.refresh(note, ["updated_at"])
    return revision


async def rename_primary_alias(
    db: AsyncSession,
    note: Note,
    alias: str,
    settings: Settings | None = None,
) -> Alias:
    """
    Rename the primary alias of a note, creating one if the note has none.

    History entries are untouched; their views follow the new name.

    Raises:
        ForbiddenIdentifierError: If the alias is reserved.
        AliasConflictError: If the alias is already taken.
    """
    settings = settings or get_settings()
    stmt = select(Alias).where(Alias.note_id == note.id, Alias.is_primary.is_(True))
    primary = (await db.execute(stmt)).scalar_one_or_none()
    if primary is not None and primary.name == alias:
        return primary

    await _check_alias_available(db, alias, settings)
    if primary is None:
        primary = Alias(note_id=note.id, name=alias, is_primary=True)
        db.add(primary)
    else:
        primary.name = alias
    await db.flush()
    return primary
