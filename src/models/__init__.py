"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.tag import Tag, note_tags  # Must be before note due to import
from models.note import Alias, Note
from models.user import User
from models.author import Author
from models.revision import Revision
from models.edit import Edit
from models.history_entry import HistoryEntry

__all__ = [
    "Alias",
    "Author",
    "Base",
    "Edit",
    "HistoryEntry",
    "Note",
    "Revision",
    "Tag",
    "TimestampMixin",
    "User",
    "note_tags",
]
