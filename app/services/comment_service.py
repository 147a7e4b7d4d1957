"""
Comment service: comment threads hanging off a Post.

Authors may edit and delete their own comments.  Admins may delete any
comment but, unlike posts, get no override on edit; see
``app.permissions.can_edit_comment``.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app import permissions
from app.errors import Forbidden, NotFound, ValidationError
from app.models import Comment, User
from app.repositories import comment_repository, post_repository

logger = logging.getLogger(__name__)


def _comment_to_dict(comment: Comment) -> dict:
    author = comment.author
    return {
        "id": comment.id,
        "content": comment.content,
        "post_id": comment.post_id,
        "author": {"id": comment.author_id, "username": author.username if author else None},
        "author_name": comment.author_name,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
        "updated_at": comment.updated_at.isoformat() if comment.updated_at else None,
    }


async def _get_or_404(db: AsyncSession, comment_id: int) -> Comment:
    comment = await comment_repository.get_by_id(db, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    return comment


async def list_comments(db: AsyncSession, post_id: int) -> list[dict]:
    """Return the comments on *post_id*, newest first.  Unknown posts yield []."""
    comments = await comment_repository.list_for_post(db, post_id)
    return [_comment_to_dict(c) for c in comments]


async def create_comment(
    db: AsyncSession, actor: User, post_id: int | None, content: str | None
) -> dict:
    """
    Add a comment by *actor* to the post identified by *post_id*.

    The post's existence is verified first so no orphan comment can be
    written.
    """
    if not content or not post_id:
        raise ValidationError("Content and post ID are required")

    if await post_repository.get_by_id(db, post_id) is None:
        raise NotFound("Post not found")

    comment = await comment_repository.create(db, post_id=post_id, content=content, author=actor)
    logger.info("Comment %d added to post %d by user %d", comment.id, post_id, actor.id)
    return _comment_to_dict(comment)


async def update_comment(
    db: AsyncSession, actor: User, comment_id: int, content: str | None
) -> dict:
    comment = await _get_or_404(db, comment_id)
    if not permissions.can_edit_comment(actor, comment):
        raise Forbidden("You can only edit your own comments")
    if not content:
        raise ValidationError("Content is required")

    comment = await comment_repository.update_content(db, comment, content)
    return _comment_to_dict(comment)


async def delete_comment(db: AsyncSession, actor: User, comment_id: int) -> None:
    comment = await _get_or_404(db, comment_id)
    if not permissions.can_delete_comment(actor, comment):
        raise Forbidden("Access denied")

    await comment_repository.delete(db, comment)
    logger.info("Comment %d deleted by user %d", comment_id, actor.id)
