"""Pydantic schemas for history endpoints."""
from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class HistoryEntryResponse(BaseModel):
    """Schema for a single history entry as shown to its owner."""

    identifier: str  # Primary alias, or public id for notes without alias
    title: str
    tags: list[str]
    pin_status: bool
    last_visited_at: datetime


class HistoryEntryUpdate(BaseModel):
    """Schema for updating a history entry. Omitted fields are left unchanged."""

    pin_status: bool | None = None

    @field_validator("pin_status")
    @classmethod
    def reject_null(cls, v: bool | None) -> bool:
        """An explicit null is not a pin state; omit the field to leave it unchanged."""
        if v is None:
            raise ValueError("pin_status must be true or false")
        return v


class HistoryEntryImport(BaseModel):
    """Schema for a single entry of a history replacement."""

    note: str = Field(description="Public id or alias of the note")
    pin_status: bool
    last_visited_at: datetime

    @field_validator("last_visited_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class HistoryImportRequest(BaseModel):
    """Schema for replacing the whole history of the current user."""

    history: list[HistoryEntryImport]
