"""Pydantic schemas for revision endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class EditResponse(BaseModel):
    """Schema for a single edit folded into a revision."""

    model_config = ConfigDict(from_attributes=True)

    username: str | None  # None for anonymous authors
    start_pos: int
    end_pos: int
    created_at: datetime
    updated_at: datetime


class RevisionMetadataResponse(BaseModel):
    """Summary of a revision (no content)."""

    id: int
    length: int
    created_at: datetime
    author_usernames: list[str]
    anonymous_author_count: int


class RevisionResponse(RevisionMetadataResponse):
    """Full revision including content, patch and edits."""

    content: str
    patch: str  # Patch from the preceding revision ('' for the first revision)
    edits: list[EditResponse]
