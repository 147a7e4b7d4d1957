"""
Post repository: data access for the ``posts`` table.

The author is joined eagerly on every read (``joinedload``) because both
the list and detail views expose ``author.username``; relationships are
``noload`` by default so nothing is fetched implicitly.
"""
from datetime import datetime, timezone

from sqlalchemy import delete as sql_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.errors import persistence_errors
from app.models import Comment, Post, User

# Columns a caller may overwrite through ``update``; author fields never change.
UPDATABLE_FIELDS: frozenset[str] = frozenset({"title", "content", "image"})


async def list_all(db: AsyncSession) -> list[Post]:
    """Every post, newest first (``id`` breaks timestamp ties)."""
    q = (
        select(Post)
        .options(joinedload(Post.author))
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    with persistence_errors("list posts"):
        result = await db.execute(q)
        return list(result.scalars().all())


async def get_by_id(db: AsyncSession, post_id: int) -> Post | None:
    q = select(Post).where(Post.id == post_id).options(joinedload(Post.author))
    with persistence_errors("get post"):
        result = await db.execute(q)
        return result.scalar_one_or_none()


async def create(
    db: AsyncSession, *, title: str, content: str, image: str, author: User
) -> Post:
    post = Post(
        title=title,
        content=content,
        image=image,
        author_id=author.id,
        author_name=author.username,
    )
    # Attach the loaded author so serialisation needs no second query.
    post.author = author
    with persistence_errors("create post"):
        db.add(post)
        await db.flush()
    return post


async def update(db: AsyncSession, post: Post, fields: dict) -> Post:
    """Overwrite the given columns on *post*; unknown keys are ignored."""
    for field, value in fields.items():
        if field in UPDATABLE_FIELDS:
            setattr(post, field, value)
    post.updated_at = datetime.now(timezone.utc)
    with persistence_errors("update post"):
        await db.flush()
    return post


async def delete(db: AsyncSession, post: Post) -> None:
    """Delete *post* together with its comments."""
    with persistence_errors("delete post"):
        await db.execute(sql_delete(Comment).where(Comment.post_id == post.id))
        await db.delete(post)
        await db.flush()
