"""
User service: registration, login and admin promotion.

Passwords are only ever stored as bcrypt hashes (``app.security``).
Email and username uniqueness is checked up front for a friendly 409 and
backed by unique constraints in the schema.
"""
import enum
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import AuthenticationRequired, Conflict, ValidationError
from app.models import ROLE_ADMIN, User
from app.repositories import user_repository
from app.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AdminOutcome(str, enum.Enum):
    ALREADY_ADMIN = "already_admin"
    PROMOTED = "promoted"
    CREATED = "created"


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def _require(**fields: str | None) -> None:
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


async def register(db: AsyncSession, username: str, email: str, password: str) -> dict:
    """Create an ordinary user and return a bearer token for them."""
    _require(username=username, email=email, password=password)
    email = email.strip().lower()

    if await user_repository.get_by_email_or_username(db, email, username) is not None:
        raise Conflict("A user with this username or email already exists")

    user = await user_repository.create(
        db, username=username, email=email, password_hash=hash_password(password)
    )
    logger.info("Registered user %d (%s)", user.id, user.username)
    return {"access_token": create_access_token(user.id), "token_type": "bearer"}


async def login(db: AsyncSession, email: str, password: str) -> dict:
    user = await user_repository.get_by_email(db, (email or "").strip().lower())
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationRequired("Invalid email or password")
    return {"access_token": create_access_token(user.id), "token_type": "bearer"}


async def ensure_admin(db: AsyncSession, email: str, username: str, password: str) -> AdminOutcome:
    """
    Make sure an admin account exists for this identity.

    A user matching *email* or *username* is promoted in place (or left
    alone if already an admin); otherwise a new admin is created.  Calling
    this repeatedly with the same arguments converges on the same state.
    """
    _require(email=email, username=username, password=password)
    email = email.strip().lower()

    existing = await user_repository.get_by_email_or_username(db, email, username)
    if existing is not None:
        if existing.role == ROLE_ADMIN:
            return AdminOutcome.ALREADY_ADMIN
        existing.role = ROLE_ADMIN
        await user_repository.save(db, existing)
        logger.info("Promoted user %d (%s) to admin", existing.id, existing.username)
        return AdminOutcome.PROMOTED

    user = await user_repository.create(
        db,
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=ROLE_ADMIN,
    )
    logger.info("Created admin user %d (%s)", user.id, user.username)
    return AdminOutcome.CREATED
