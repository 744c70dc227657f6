"""HistoryEntry model - a user's visit bookmark for a note."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.note import Note
    from models.user import User


class HistoryEntry(Base):
    """
    Per-(user, note) visit record.

    The composite primary key is the conflict target of the visit upsert, so
    concurrent visits of the same note by the same user converge to one row.
    Title and tags are never stored here; views read them from the note.
    """

    __tablename__ = "history_entries"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    note_id: Mapped[int] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    pin_status: Mapped[bool] = mapped_column(default=False, nullable=False)
    # Last-visited timestamp
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )

    user: Mapped["User"] = relationship(back_populates="history_entries")
    note: Mapped["Note"] = relationship()
