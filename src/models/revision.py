"""Revision model - immutable content snapshot of a note."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.edit import Edit
    from models.note import Note


class Revision(Base):
    """
    Snapshot of a note's content plus the patch from its predecessor.

    Storage columns:
    - content: Full content at this revision (fixed once created)
    - patch: diff-match-patch text turning the previous revision's content into
      this one ('' for the first revision of a note)
    - length: len(content), kept so summaries never load content

    Revisions of a note are totally ordered by (created_at, id).
    """

    __tablename__ = "revisions"

    id: Mapped[int] = mapped_column(primary_key=True)
    note_id: Mapped[int] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    patch: Mapped[str] = mapped_column(Text, nullable=False, default="")
    length: Mapped[int] = mapped_column(nullable=False)

    # Only created_at - revisions are immutable
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )

    note: Mapped["Note"] = relationship(back_populates="revisions")
    edits: Mapped[list["Edit"]] = relationship(
        back_populates="revision",
        passive_deletes=True,
    )

    __table_args__ = (
        # Latest/first lookups: ORDER BY created_at, id within a note
        Index("ix_revisions_note_created", "note_id", "created_at", "id"),
    )
