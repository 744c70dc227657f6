"""Note and Alias models."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin
from models.tag import note_tags

if TYPE_CHECKING:
    from models.author import Author
    from models.revision import Revision
    from models.tag import Tag


class Note(Base, TimestampMixin):
    """
    Note model - the unit that owns revisions, authors and edits.

    A note is addressed either by its random public_id or by any of its aliases.
    History views show the primary alias when one exists, so renaming that alias
    changes what users see without touching their history entries.
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(primary_key=True)
    public_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    aliases: Mapped[list["Alias"]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
    )
    tag_objects: Mapped[list["Tag"]] = relationship(
        secondary=note_tags,
        back_populates="notes",
    )
    revisions: Mapped[list["Revision"]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    authors: Mapped[list["Author"]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Alias(Base):
    """Human-readable name for a note. At most one alias per note is primary."""

    __tablename__ = "aliases"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    note_id: Mapped[int] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_primary: Mapped[bool] = mapped_column(default=False, nullable=False)

    note: Mapped["Note"] = relationship(back_populates="aliases")

    __table_args__ = (
        Index(
            "uq_aliases_one_primary_per_note",
            "note_id",
            unique=True,
            postgresql_where=text("is_primary"),
        ),
    )
