"""Promote or create an admin account from the command line.

Usage, after ``pip install -e .``::

    blog-create-admin <email> <username> <password>

or from the repository root::

    python -m scripts.create_admin <email> <username> <password>

Exits 0 when the identity is (now) an admin, non-zero on bad arguments or
any database failure.  Safe to run repeatedly.
"""
import argparse
import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import configure_logging
from app.database import async_session, create_tables
from app.services.user_service import AdminOutcome, ensure_admin

logger = logging.getLogger(__name__)

MESSAGES = {
    AdminOutcome.ALREADY_ADMIN: "User %s already exists and is already an admin",
    AdminOutcome.PROMOTED: "User updated to admin: %s",
    AdminOutcome.CREATED: "Admin user created successfully: %s",
}


async def create_admin(
    email: str,
    username: str,
    password: str,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AdminOutcome:
    """Run ``ensure_admin`` in its own committed transaction."""
    if session_factory is None:
        await create_tables()
        session_factory = async_session

    async with session_factory() as session:
        try:
            outcome = await ensure_admin(session, email, username, password)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    return outcome


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Promote or create an admin user")
    parser.add_argument("email")
    parser.add_argument("username")
    parser.add_argument("password")
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    try:
        outcome = asyncio.run(create_admin(args.email, args.username, args.password))
    except Exception:
        logger.exception("Error creating admin")
        return 1
    logger.info(MESSAGES[outcome], args.username)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
