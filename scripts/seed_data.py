"""Seed script to set up the local dev database with a few notes, revisions and visits.

The schema must exist first (``alembic upgrade head``).

Usage:
    PYTHONPATH=src python scripts/seed_data.py populate
    PYTHONPATH=src python scripts/seed_data.py clear
"""

import argparse
import asyncio
import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.auth import DEV_USERNAME
from core.config import get_settings
from models import HistoryEntry, Note, Tag, User
from schemas.history import HistoryEntryUpdate
from services import note_service, user_service
from services.history_service import history_service

logger = logging.getLogger(__name__)

NOTES = [
    {
        'alias': 'meeting-notes',
        'tags': ['meetings', 'team'],
        'revisions': [
            '# Weekly sync\n\n- agenda tbd\n',
            '# Weekly sync\n\n- review open issues\n- plan release\n',
            '# Weekly sync\n\n- review open issues\n- plan release 1.4\n- retro\n',
        ],
    },
    {
        'alias': 'reading-list',
        'tags': ['personal'],
        'revisions': [
            '# Reading list\n\n1. Designing Data-Intensive Applications\n',
            '# Reading list\n\n1. Designing Data-Intensive Applications\n2. Crafting Interpreters\n',
        ],
    },
    {
        'alias': None,
        'tags': [],
        'revisions': ['Scratch pad without a heading.\n'],
    },
]


async def populate() -> None:
    """Create notes with revision chains and visit them as the dev user."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as db:
        user = await user_service.get_or_create_user(db, DEV_USERNAME, email='dev@localhost')
        collaborator = await user_service.get_or_create_user(db, 'alice')
        for i, note_data in enumerate(NOTES):
            first, *rest = note_data['revisions']
            note = await note_service.create_note(
                db, first, owner=user, alias=note_data['alias'], tags=note_data['tags'],
            )
            for j, content in enumerate(rest):
                # Alternate between a registered collaborator and anonymous edits
                editor = collaborator if j % 2 == 0 else None
                await note_service.update_content(db, note, editor, content)
            await history_service.touch(db, note, user)
            if i == 0:
                await history_service.update(db, note, user, HistoryEntryUpdate(pin_status=True))
        await db.commit()
    await engine.dispose()
    logger.info('Populated %d notes', len(NOTES))


async def clear() -> None:
    """Delete all seeded data (notes cascade to revisions, edits, authors and history)."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as db:
        await db.execute(delete(HistoryEntry))
        await db.execute(delete(Note))
        await db.execute(delete(Tag))
        await db.execute(delete(User))
        await db.commit()
    await engine.dispose()
    logger.info('Cleared all data')


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    settings = get_settings()
    if not settings.dev_mode:
        raise SystemExit('Refusing to seed: DEV_MODE is not enabled.')

    parser = argparse.ArgumentParser(description='Seed the dev database with test data.')
    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('populate', help='Populate database with test data')
    subparsers.add_parser('clear', help='Delete all data')
    args = parser.parse_args()

    if args.command == 'populate':
        asyncio.run(populate())
    elif args.command == 'clear':
        asyncio.run(clear())


if __name__ == '__main__':
    main()
