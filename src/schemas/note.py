"""Pydantic schemas for note endpoints."""
from datetime import datetime

from pydantic import BaseModel, field_validator

from schemas.validators import (
    validate_alias,
    validate_and_normalize_tags,
    validate_content_length,
    validate_title_length,
)


class NoteCreate(BaseModel):
    """Schema for creating a new note."""

    content: str = ""
    alias: str | None = None
    title: str | None = None  # Derived from the first heading when omitted
    tags: list[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        """Normalize and validate tags."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)

    @field_validator("alias")
    @classmethod
    def check_alias(cls, v: str | None) -> str | None:
        """Validate alias format."""
        return validate_alias(v)

    @field_validator("content")
    @classmethod
    def check_content_length(cls, v: str) -> str:
        """Validate content length."""
        return validate_content_length(v)

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)


class NoteContentUpdate(BaseModel):
    """Schema for replacing the content of a note."""

    content: str

    @field_validator("content")
    @classmethod
    def check_content_length(cls, v: str) -> str:
        """Validate content length."""
        return validate_content_length(v)


class NoteAliasUpdate(BaseModel):
    """Schema for renaming the primary alias of a note."""

    alias: str

    @field_validator("alias")
    @classmethod
    def check_alias(cls, v: str) -> str:
        """Validate alias format."""
        return validate_alias(v)


class NoteResponse(BaseModel):
    """Schema for a note with its latest content."""

    identifier: str
    public_id: str
    primary_alias: str | None
    title: str
    tags: list[str]
    content: str
    created_at: datetime
    updated_at: datetime
