from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import Conflict, PersistenceError, persistence_errors
from app.models import ROLE_USER, User


async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
    with persistence_errors("get user"):
        return await db.get(User, user_id)


async def get_by_email(db: AsyncSession, email: str) -> User | None:
    with persistence_errors("get user by email"):
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


async def get_by_email_or_username(db: AsyncSession, email: str, username: str) -> User | None:
    """First user whose email OR username matches (emails win on a split match)."""
    q = (
        select(User)
        .where(or_(User.email == email, User.username == username))
        .order_by((User.email == email).desc(), User.id)
        .limit(1)
    )
    with persistence_errors("find user"):
        result = await db.execute(q)
        return result.scalar_one_or_none()


async def create(
    db: AsyncSession,
    *,
    username: str,
    email: str,
    password_hash: str,
    role: str = ROLE_USER,
) -> User:
    """
    Insert a user.  Unique-constraint violations surface as ``Conflict``
    rather than a generic persistence failure.
    """
    user = User(username=username, email=email, password_hash=password_hash, role=role)
    db.add(user)
    try:
        with persistence_errors("create user"):
            await db.flush()
    except PersistenceError as exc:
        if isinstance(exc.__cause__, IntegrityError):
            await db.rollback()
            raise Conflict("A user with this username or email already exists") from exc.__cause__
        raise
    return user


async def save(db: AsyncSession, user: User) -> User:
    with persistence_errors("save user"):
        await db.flush()
    return user
