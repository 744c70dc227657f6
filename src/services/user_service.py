"""Service layer for user lookup and creation."""
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from services.exceptions import NotFoundError


async def get_by_username(db: AsyncSession, username: str) -> User:
    """
    Get a user by username.

    Raises:
        NotFoundError: If no user has this username.
    """
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User", username)
    return user


async def get_or_create_user(
    db: AsyncSession,
    username: str,
    email: str | None = None,
) -> User:
    """
    Get existing user or create new one from token claims.

    Handles race conditions where multiple concurrent requests may try to create
    the same user simultaneously. The insert runs in a savepoint; if it hits the
    unique constraint on username, the savepoint is rolled back and the row that
    won the race is fetched instead.

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    """
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(username=username, email=email)
        try:
            async with db.begin_nested():
                db.add(user)
                await db.flush()
        except IntegrityError:
            result = await db.execute(select(User).where(User.username == username))
            user = result.scalar_one()

    if email and user.email != email:
        user.email = email
        await db.flush()

    return user
