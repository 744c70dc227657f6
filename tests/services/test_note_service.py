"""Tests for the note directory and note-level operations."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from models.note import Note
from models.user import User
from services import authorship_service, edit_service, note_service
from services.exceptions import AliasConflictError, ForbiddenIdentifierError, NotFoundError
from services.revision_service import revision_service


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user for note service tests."""
    user = User(username="note-tester", email="notes@test.com")
    db_session.add(user)
    await db_session.flush()
    return user


@pytest.fixture
async def test_note(db_session: AsyncSession, test_user: User) -> Note:
    """Create a note with alias 'meeting-notes'."""
    return await note_service.create_note(
        db_session, "# Meeting\n\nAgenda", owner=test_user, alias="meeting-notes",
    )


class TestResolveNote:
    """Tests for note_service.resolve_note()."""

    async def test__resolve_note__by_alias(
        self,
        db_session: AsyncSession,
        test_note: Note,
    ) -> None:
        """A note resolves by its alias."""
        resolved = await note_service.resolve_note(db_session, "meeting-notes")
        assert resolved.id == test_note.id

    async def test__resolve_note__by_public_id(
        self,
        db_session: AsyncSession,
        test_note: Note,
    ) -> None:
        """A note resolves by its public id."""
        resolved = await note_service.resolve_note(db_session, test_note.public_id)
        assert resolved.id == test_note.id

    async def test__resolve_note__unknown_raises_not_found(
        self,
        db_session: AsyncSession,
    ) -> None:
        """An unknown reference raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await note_service.resolve_note(db_session, "does-not-exist")

    @pytest.mark.parametrize("identifier", ["api", "public", "new", "favicon.ico", "robots.txt"])
    async def test__resolve_note__forbidden_raises(
        self,
        db_session: AsyncSession,
        identifier: str,
    ) -> None:
        """Reserved identifiers raise ForbiddenIdentifierError, not NotFoundError."""
        with pytest.raises(ForbiddenIdentifierError):
            await note_service.resolve_note(db_session, identifier)

    async def test__resolve_note__custom_forbidden_list(
        self,
        db_session: AsyncSession,
        test_note: Note,  # noqa: ARG002
    ) -> None:
        """The reserved identifiers come from settings."""
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            FORBIDDEN_NOTE_IDS="meeting-notes",
            DEV_MODE="false",
        )
        with pytest.raises(ForbiddenIdentifierError):
            await note_service.resolve_note(db_session, "meeting-notes", settings)


class TestCreateNote:
    """Tests for note_service.create_note()."""

    async def test__create_note__first_revision_and_authorship(
        self,
        db_session: AsyncSession,
        test_note: Note,
    ) -> None:
        """A new note has one revision, authored by the owner, with empty patch."""
        revisions = await revision_service.get_all(db_session, test_note)

        assert len(revisions) == 1
        assert revisions[0].content == "# Meeting\n\nAgenda"
        assert revisions[0].patch == ""
        assert await authorship_service.resolve_usernames(db_session, revisions[0]) == [
            "note-tester",
        ]

    async def test__create_note__title_from_heading(self, test_note: Note) -> None:
        """Without an explicit title, the first heading becomes the title."""
        assert test_note.title == "Meeting"

    async def test__create_note__explicit_title_and_tags(
        self,
        db_session: AsyncSession,
        test_user: User,
    ) -> None:
        """Explicit title wins over the heading; tags are attached."""
        note = await note_service.create_note(
            db_session,
            "# Heading",
            owner=test_user,
            title="Explicit",
            tags=["b-tag", "a-tag"],
        )

        assert note.title == "Explicit"
        assert await note_service.get_tag_names(db_session, note) == ["a-tag", "b-tag"]
        assert await note_service.get_identifier(db_session, note) == note.public_id

    async def test__create_note__existing_tags_are_reused(
        self,
        db_session: AsyncSession,
        test_user: User,
    ) -> None:
        """Creating two notes with the same tag shares one Tag row."""
        first = await note_service.get_or_create_tags(db_session, ["shared"])
        second = await note_service.get_or_create_tags(db_session, ["shared", "fresh"])

        assert first[0].id == second[0].id
        assert second[1].name == "fresh"
        await note_service.create_note(db_session, "x", owner=test_user, tags=["shared"])

    async def test__create_note__without_owner_is_anonymous(
        self,
        db_session: AsyncSession,
    ) -> None:
        """A note created without owner is attributed to an anonymous author."""
        note = await note_service.create_note(db_session, "guest text", owner=None)
        revision = await revision_service.get_latest(db_session, note)

        assert note.owner_id is None
        assert await authorship_service.resolve_usernames(db_session, revision) == []
        assert await authorship_service.count_anonymous(db_session, revision) == 1

    async def test__create_note__alias_conflict(
        self,
        db_session: AsyncSession,
        test_user: User,
        test_note: Note,  # noqa: ARG002
    ) -> None:
        """An alias already in use is rejected."""
        with pytest.raises(AliasConflictError):
            await note_service.create_note(
                db_session, "dup", owner=test_user, alias="meeting-notes",
            )

    async def test__create_note__alias_equal_to_public_id_conflicts(
        self,
        db_session: AsyncSession,
        test_user: User,
        test_note: Note,
    ) -> None:
        """An alias may not shadow an existing public id."""
        with pytest.raises(AliasConflictError):
            await note_service.create_note(
                db_session, "dup", owner=test_user, alias=test_note.public_id,
            )

    async def test__create_note__forbidden_alias(
        self,
        db_session: AsyncSession,
        test_user: User,
    ) -> None:
        """A reserved identifier cannot become an alias."""
        with pytest.raises(ForbiddenIdentifierError):
            await note_service.create_note(db_session, "x", owner=test_user, alias="new")


class TestUpdateContent:
    """Tests for note_service.update_content()."""

    async def test__update_content__creates_revision_with_edit(
        self,
        db_session: AsyncSession,
        test_note: Note,
        test_user: User,
    ) -> None:
        """A change records one edit over the changed range and folds it."""
        revision = await note_service.update_content(
            db_session, test_note, test_user, "# Meeting\n\nAgenda and minutes",
        )

        edits = await edit_service.get_edits_for_revision(db_session, revision)
        assert [(e.start_pos, e.end_pos) for e in edits] == [(17, 29)]
        assert revision.content == "# Meeting\n\nAgenda and minutes"
        assert await edit_service.get_pending_edits(db_session, test_note) == []

    async def test__update_content__bumps_note_updated_at(
        self,
        db_session: AsyncSession,
        test_note: Note,
        test_user: User,
    ) -> None:
        """A new revision moves the note's updated_at forward."""
        before = test_note.updated_at

        await note_service.update_content(db_session, test_note, test_user, "changed")

        assert test_note.updated_at > before

    async def test__update_content__unchanged_keeps_note_updated_at(
        self,
        db_session: AsyncSession,
        test_note: Note,
        test_user: User,
    ) -> None:
        """Saving identical content does not touch the note."""
        before = test_note.updated_at

        await note_service.update_content(db_session, test_note, test_user, "# Meeting\n\nAgenda")

        assert test_note.updated_at == before

    async def test__update_content__unchanged_creates_nothing(
        self,
        db_session: AsyncSession,
        test_note: Note,
        test_user: User,
    ) -> None:
        """Saving identical content returns the latest revision."""
        latest = await revision_service.get_latest(db_session, test_note)

        revision = await note_service.update_content(
            db_session, test_note, test_user, "# Meeting\n\nAgenda",
        )

        assert revision.id == latest.id
        assert len(await revision_service.get_all(db_session, test_note)) == 1

    async def test__update_content__anonymous_contributor(
        self,
        db_session: AsyncSession,
        test_note: Note,
    ) -> None:
        """Anonymous saves are counted, not named."""
        revision = await note_service.update_content(db_session, test_note, None, "replaced")

        assert await authorship_service.resolve_usernames(db_session, revision) == []
        assert await authorship_service.count_anonymous(db_session, revision) == 1


class TestChangedRange:
    """Tests for the changed-range computation of content updates."""

    @pytest.mark.parametrize(
        ("previous", "content", "expected"),
        [
            ("Hello", "Hello World", (5, 11)),
            ("Hello World", "Hello", (5, 5)),
            ("abc", "aXc", (1, 2)),
            ("", "new", (0, 3)),
            ("aaa", "aaaa", (3, 4)),
            ("same", "same", (4, 4)),
        ],
    )
    def test__changed_range(
        self,
        previous: str,
        content: str,
        expected: tuple[int, int],
    ) -> None:
        """The range covers the differing part of the new content."""
        assert note_service._changed_range(previous, content) == expected


class TestExtractTitle:
    """Tests for note_service.extract_title()."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ("# Title\nbody", "Title"),
            ("intro\n# Later title", "Later title"),
            ("## Sub only", ""),
            ("# Closed heading ##", "Closed heading"),
            ("no heading", ""),
            ("", ""),
        ],
    )
    def test__extract_title(self, content: str, expected: str) -> None:
        """The first level-one heading is the title."""
        assert note_service.extract_title(content) == expected


class TestRenamePrimaryAlias:
    """Tests for note_service.rename_primary_alias()."""

    async def test__rename_primary_alias__old_name_stops_resolving(
        self,
        db_session: AsyncSession,
        test_note: Note,
    ) -> None:
        """After a rename the note resolves by the new name only."""
        await note_service.rename_primary_alias(db_session, test_note, "standup")

        assert (await note_service.resolve_note(db_session, "standup")).id == test_note.id
        with pytest.raises(NotFoundError):
            await note_service.resolve_note(db_session, "meeting-notes")

    async def test__rename_primary_alias__same_name_is_noop(
        self,
        db_session: AsyncSession,
        test_note: Note,
    ) -> None:
        """Renaming to the current name succeeds."""
        alias = await note_service.rename_primary_alias(db_session, test_note, "meeting-notes")
        assert alias.name == "meeting-notes"

    async def test__rename_primary_alias__creates_when_missing(
        self,
        db_session: AsyncSession,
        test_user: User,
    ) -> None:
        """A note without alias gets a primary alias."""
        note = await note_service.create_note(db_session, "plain", owner=test_user)

        await note_service.rename_primary_alias(db_session, note, "plain-note")

        assert await note_service.get_primary_alias(db_session, note) == "plain-note"

    async def test__rename_primary_alias__conflict(
        self,
        db_session: AsyncSession,
        test_note: Note,
        test_user: User,
    ) -> None:
        """Renaming to an alias of another note is rejected."""
        await note_service.create_note(db_session, "other", owner=test_user, alias="taken")

        with pytest.raises(AliasConflictError):
            await note_service.rename_primary_alias(db_session, test_note, "taken")

    async def test__rename_primary_alias__forbidden(
        self,
        db_session: AsyncSession,
        test_note: Note,
    ) -> None:
        """Reserved identifiers cannot be used as alias."""
        with pytest.raises(ForbiddenIdentifierError):
            await note_service.rename_primary_alias(db_session, test_note, "robots.txt")
