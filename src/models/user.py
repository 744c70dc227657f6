"""User model for registered accounts."""
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.author import Author
    from models.history_entry import HistoryEntry


class User(Base, TimestampMixin):
    """User model - a registered account that may author edits and keep a visit history."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        comment="Login name; also the 'sub' claim of access tokens",
    )
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    authors: Mapped[list["Author"]] = relationship(back_populates="user")
    history_entries: Mapped[list["HistoryEntry"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
