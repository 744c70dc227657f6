"""Service layer for note revisions: folding, lookup, purge and patch-chain replay."""
import logging
from dataclasses import dataclass

from diff_match_patch import diff_match_patch
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.edit import Edit
from models.note import Note
from models.revision import Revision
from schemas.revision import RevisionMetadataResponse, RevisionResponse
from services import authorship_service, edit_service
from services.exceptions import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class ReconstructionResult:
    """Result of replaying the patch chain up to a revision."""

    content: str  # Content obtained by applying patches from the first revision
    matches_snapshot: bool  # Whether it equals the stored content of the revision
    warnings: list[str] | None = None  # Warnings if patches failed to apply


class RevisionService:
    """Service for creating, querying and purging revisions of a note."""

    def __init__(self) -> None:
        """Initialize the revision service with diff-match-patch."""
        self.dmp = diff_match_patch()

    def make_patch(self, previous_content: str, content: str) -> str:
        """Patch text that turns previous_content into content."""
        patches = self.dmp.patch_make(previous_content, content)
        return self.dmp.patch_toText(patches)

    async def lock_note(self, db: AsyncSession, note: Note) -> None:
        """
        Take the per-note row lock for the rest of the transaction.

        Serializes folds and purges of the same note. Callers that decide what to
        fold from the current latest revision take it before reading; taking it
        again later in the same transaction does not block. Plain readers are not
        blocked; MVCC shows them either the old or the new revision set.
        """
        await db.execute(select(Note.id).where(Note.id == note.id).with_for_update())

    async def get_all(self, db: AsyncSession, note: Note) -> list[Revision]:
        """
        Get all revisions of a note.

        Callers must not rely on the order; it happens to be ascending by
        (created_at, id).
        """
        stmt = (
            select(Revision)
            .where(Revision.note_id == note.id)
            .order_by(Revision.created_at, Revision.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_latest(self, db: AsyncSession, note: Note) -> Revision:
        """
        Get the revision with the highest (created_at, id).

        Raises:
            NotFoundError: If the note has no revisions.
        """
        stmt = (
            select(Revision)
            .where(Revision.note_id == note.id)
            .order_by(Revision.created_at.desc(), Revision.id.desc())
            .limit(1)
        )
        revision = (await db.execute(stmt)).scalar_one_or_none()
        if revision is None:
            raise NotFoundError("Revision for note", note.public_id)
        return revision

    async def get_first(self, db: AsyncSession, note: Note) -> Revision:
        """
        Get the revision with the lowest (created_at, id).

        Raises:
            NotFoundError: If the note has no revisions.
        """
        stmt = (
            select(Revision)
            .where(Revision.note_id == note.id)
            .order_by(Revision.created_at, Revision.id)
            .limit(1)
        )
        revision = (await db.execute(stmt)).scalar_one_or_none()
        if revision is None:
            raise NotFoundError("Revision for note", note.public_id)
        return revision

    async def get_by_id(self, db: AsyncSession, note: Note, revision_id: int) -> Revision:
        """
        Get a revision by ID, scoped to the note.

        Raises:
            NotFoundError: If the revision does not exist or belongs to another note.
        """
        stmt = select(Revision).where(
            Revision.id == revision_id,
            Revision.note_id == note.id,
        )
        revision = (await db.execute(stmt)).scalar_one_or_none()
        if revision is None:
            raise NotFoundError("Revision", revision_id)
        return revision

    async def create(
        self,
        db: AsyncSession,
        note: Note,
        content: str,
        edits: list[Edit] | None = None,
    ) -> Revision:
        """
        Fold edits into a new revision of the note.

        Under the per-note lock: locate the current latest revision, compute the
        patch from its content to the new content ('' when this is the first
        revision), insert the revision and attach the edits. Everything happens in
        the caller's transaction, so an aborted request leaves no partial revision.

        Args:
            db: Database session.
            note: Note the revision belongs to.
            content: Full content of the new revision.
            edits: Edits to fold. Defaults to all pending edits of the note.

        Returns:
            The created Revision.

        Raises:
            ValueError: If an edit belongs to another note or is already folded.
        """
        await self.lock_note(db, note)

        try:
            previous = await self.get_latest(db, note)
        except NotFoundError:
            previous = None

        patch = "" if previous is None else self.make_patch(previous.content, content)

        if edits is None:
            edits = await edit_service.get_pending_edits(db, note)
        for edit in edits:
            if edit.note_id != note.id:
                raise ValueError(f"Edit {edit.id} does not belong to note {note.id}")
            if edit.revision_id is not None:
                raise ValueError(f"Edit {edit.id} is already part of revision {edit.revision_id}")

        revision = Revision(
            note_id=note.id,
            content=content,
            patch=patch,
            length=len(content),
        )
        db.add(revision)
        await db.flush()

        for edit in edits:
            edit.revision_id = revision.id
        await db.flush()
        await db.refresh(revision)

        logger.debug(
            "Folded %d edit(s) into revision %d of note %s",
            len(edits),
            revision.id,
            note.public_id,
        )
        return revision

    async def purge(self, db: AsyncSession, note: Note) -> list[Revision]:
        """
        Delete every revision of a note except the latest.

        The surviving revision becomes the first one, so its patch is reset to ''.
        Edits of the removed revisions go with them.

        Returns:
            The removed revisions.

        Raises:
            NotFoundError: If the note has no revisions.
        """
        await self.lock_note(db, note)
        latest = await self.get_latest(db, note)
        removed = [r for r in await self.get_all(db, note) if r.id != latest.id]
        if not removed:
            return []

        await db.execute(
            delete(Revision)
            .where(Revision.note_id == note.id, Revision.id != latest.id)
            .execution_options(synchronize_session=False),
        )
        latest.patch = ""
        await db.flush()

        logger.info(
            "Purged %d revision(s) of note %s, kept revision %d",
            len(removed),
            note.public_id,
            latest.id,
        )
        return removed

    async def purge_with_summaries(
        self,
        db: AsyncSession,
        note: Note,
    ) -> list[RevisionMetadataResponse]:
        """
        Purge old revisions and report them.

        Summaries are built before the delete, while the edits that carry the
        authorship still exist. The note lock taken here is held until the
        transaction ends, so the purged set equals the summarized set.
        """
        await self.lock_note(db, note)
        latest = await self.get_latest(db, note)
        summaries = [
            await self.to_summary(db, revision)
            for revision in await self.get_all(db, note)
            if revision.id != latest.id
        ]
        await self.purge(db, note)
        return summaries

    async def reconstruct_content(
        self,
        db: AsyncSession,
        note: Note,
        revision_id: int,
    ) -> ReconstructionResult:
        """
        Rebuild the content of a revision from the patch chain.

        Starts from the content of the first revision and applies each later
        patch in (created_at, id) order up to and including the target.

        Raises:
            NotFoundError: If the revision does not exist for this note.
        """
        target = await self.get_by_id(db, note, revision_id)
        chain = [
            r for r in await self.get_all(db, note)
            if (r.created_at, r.id) <= (target.created_at, target.id)
        ]

        content = chain[0].content
        warnings: list[str] = []
        for revision in chain[1:]:
            if not revision.patch:
                continue
            try:
                patches = self.dmp.patch_fromText(revision.patch)
                new_content, results = self.dmp.patch_apply(patches, content)
                if not all(results):
                    warnings.append(f"Partial patch failure at revision {revision.id}")
                    logger.warning(
                        "Patch application partial failure for note %s revision %d: %s",
                        note.public_id,
                        revision.id,
                        results,
                    )
                content = new_content
            except ValueError as e:
                warnings.append(f"Corrupted patch at revision {revision.id}: {e}")
                logger.warning(
                    "Corrupted patch for note %s revision %d: %s",
                    note.public_id,
                    revision.id,
                    e,
                )

        return ReconstructionResult(
            content=content,
            matches_snapshot=content == target.content,
            warnings=warnings if warnings else None,
        )

    async def to_summary(
        self,
        db: AsyncSession,
        revision: Revision,
    ) -> RevisionMetadataResponse:
        """Build the summary view of a revision."""
        authors = await authorship_service.resolve_authors(db, revision)
        return RevisionMetadataResponse(
            id=revision.id,
            length=revision.length,
            created_at=revision.created_at,
            author_usernames=authorship_service.usernames_of(authors),
            anonymous_author_count=authorship_service.anonymous_count_of(authors),
        )

    async def to_detail(self, db: AsyncSession, revision: Revision) -> RevisionResponse:
        """Build the detail view of a revision, including content, patch and edits."""
        summary = await self.to_summary(db, revision)
        return RevisionResponse(
            **summary.model_dump(),
            content=revision.content,
            patch=revision.patch,
            edits=await edit_service.get_edit_views(db, revision),
        )


# Singleton instance for use throughout the application
revision_service = RevisionService()
