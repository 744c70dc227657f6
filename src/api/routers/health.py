"""Liveness check: reports whether the database answers and the schema is in place."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_async_session
from models.note import Note

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check result."""

    status: str  # 'healthy' or 'degraded'
    database: str  # 'healthy' or 'unhealthy'


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_async_session)) -> HealthResponse:
    """Query the notes table; any database error degrades the service."""
    try:
        await db.execute(select(Note.id).limit(1))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the notes table")
        return HealthResponse(status="degraded", database="unhealthy")
    return HealthResponse(status="healthy", database="healthy")
