"""Author model - a per-note contribution identity."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.edit import Edit
    from models.note import Note
    from models.user import User


class Author(Base):
    """
    Contribution identity scoped to one note.

    An author without a linked user is anonymous. Its identity must never be
    surfaced in API responses; anonymous authors are only ever counted.
    """

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(primary_key=True)
    note_id: Mapped[int] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )

    note: Mapped["Note"] = relationship(back_populates="authors")
    user: Mapped["User"] = relationship(back_populates="authors")
    edits: Mapped[list["Edit"]] = relationship(back_populates="author")

    __table_args__ = (
        # One linked author per (note, user); anonymous authors are unconstrained
        Index(
            "uq_authors_note_user",
            "note_id",
            "user_id",
            unique=True,
            postgresql_where=text("user_id IS NOT NULL"),
        ),
    )
