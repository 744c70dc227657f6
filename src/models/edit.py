"""Edit model - an atomic authored change, folded into a revision."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.author import Author
    from models.revision import Revision


class Edit(Base, TimestampMixin):
    """
    A finalized change to a character range of a note.

    revision_id is NULL while the edit is pending; the fold that creates the
    next revision claims all pending edits of the note.
    """

    __tablename__ = "edits"

    id: Mapped[int] = mapped_column(primary_key=True)
    note_id: Mapped[int] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[int] = mapped_column(
        ForeignKey("authors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    revision_id: Mapped[int | None] = mapped_column(
        ForeignKey("revisions.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    start_pos: Mapped[int] = mapped_column(nullable=False)
    end_pos: Mapped[int] = mapped_column(nullable=False)

    author: Mapped["Author"] = relationship(back_populates="edits")
    revision: Mapped["Revision"] = relationship(back_populates="edits")

    __table_args__ = (
        # Pending-edit lookup during a fold
        Index("ix_edits_note_pending", "note_id", "revision_id"),
    )
