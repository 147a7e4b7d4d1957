from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.errors import persistence_errors
from app.models import Comment, User


async def list_for_post(db: AsyncSession, post_id: int) -> list[Comment]:
    """Comments on *post_id*, newest first, with the author joined."""
    q = (
        select(Comment)
        .where(Comment.post_id == post_id)
        .options(joinedload(Comment.author))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    with persistence_errors("list comments"):
        result = await db.execute(q)
        return list(result.scalars().all())


async def get_by_id(db: AsyncSession, comment_id: int) -> Comment | None:
    q = select(Comment).where(Comment.id == comment_id).options(joinedload(Comment.author))
    with persistence_errors("get comment"):
        result = await db.execute(q)
        return result.scalar_one_or_none()


async def create(db: AsyncSession, *, post_id: int, content: str, author: User) -> Comment:
    comment = Comment(
        content=content,
        post_id=post_id,
        author_id=author.id,
        author_name=author.username,
    )
    comment.author = author
    with persistence_errors("create comment"):
        db.add(comment)
        await db.flush()
    return comment


async def update_content(db: AsyncSession, comment: Comment, content: str) -> Comment:
    comment.content = content
    comment.updated_at = datetime.now(timezone.utc)
    with persistence_errors("update comment"):
        await db.flush()
    return comment


async def delete(db: AsyncSession, comment: Comment) -> None:
    with persistence_errors("delete comment"):
        await db.delete(comment)
        await db.flush()
