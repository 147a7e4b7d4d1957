"""
Post service: business rules for the Post aggregate.

Design notes
------------
- Visibility depends on who asks: anonymous readers of the list get a
  content preview and no ``author`` reference, only the denormalized
  ``author_name``.  Authenticated readers get everything.
- Ownership checks live in ``app.permissions``; owners and admins may
  both edit and delete a post.
- Partial updates treat an empty ``title`` or ``content`` as "not
  supplied", so a form that leaves a field blank keeps the stored value.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency in the router layer.
"""
import logging

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app import permissions, uploads
from app.config import settings
from app.errors import Forbidden, NotFound, PersistenceError, ValidationError
from app.models import Post, User
from app.repositories import post_repository

logger = logging.getLogger(__name__)

ELLIPSIS = "..."


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _serialize_author(author: User | None, author_id: int) -> dict:
    return {"id": author_id, "username": author.username if author else None}


def preview(content: str, length: int | None = None) -> str:
    """First *length* characters of *content*, with an ellipsis only when cut."""
    length = settings.PREVIEW_LENGTH if length is None else length
    if len(content) <= length:
        return content
    return content[:length] + ELLIPSIS


def _post_to_dict(post: Post) -> dict:
    """Serialise a Post ORM instance to a plain dict (full view)."""
    return {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "image": post.image,
        "author": _serialize_author(post.author, post.author_id),
        "author_name": post.author_name,
        "created_at": post.created_at.isoformat() if post.created_at else None,
        "updated_at": post.updated_at.isoformat() if post.updated_at else None,
    }


def _post_to_public_dict(post: Post) -> dict:
    """Anonymous list view: truncated content, no author reference."""
    data = _post_to_dict(post)
    del data["author"]
    data["content"] = preview(post.content)
    return data


async def _get_or_404(db: AsyncSession, post_id: int) -> Post:
    post = await post_repository.get_by_id(db, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def list_posts(db: AsyncSession, actor: User | None = None) -> list[dict]:
    """Return every post, newest first, shaped for *actor* (None = anonymous)."""
    posts = await post_repository.list_all(db)
    if actor is None:
        return [_post_to_public_dict(p) for p in posts]
    return [_post_to_dict(p) for p in posts]


async def get_post(db: AsyncSession, post_id: int) -> dict:
    return _post_to_dict(await _get_or_404(db, post_id))


async def create_post(
    db: AsyncSession,
    actor: User,
    title: str | None,
    content: str | None,
    image: UploadFile | None = None,
) -> dict:
    """
    Create a post owned by *actor*.

    Required fields are checked before the image is stored so a rejected
    request leaves neither a row nor a file behind.
    """
    if not title or not content:
        raise ValidationError("Title and content are required")

    image_ref = await uploads.store_image(image) if uploads.has_file(image) else ""
    try:
        post = await post_repository.create(
            db, title=title, content=content, image=image_ref, author=actor
        )
    except PersistenceError:
        if image_ref:
            await uploads.discard_image(image_ref)
        raise
    logger.info("Post %d created by user %d", post.id, actor.id)
    return _post_to_dict(post)


async def update_post(
    db: AsyncSession,
    actor: User,
    post_id: int,
    title: str | None = None,
    content: str | None = None,
    image: UploadFile | None = None,
) -> dict:
    post = await _get_or_404(db, post_id)
    if not permissions.can_edit_post(actor, post):
        raise Forbidden("You can only edit your own posts")

    fields: dict = {}
    if title:
        fields["title"] = title
    if content:
        fields["content"] = content
    if uploads.has_file(image):
        fields["image"] = await uploads.store_image(image)

    try:
        post = await post_repository.update(db, post, fields)
    except PersistenceError:
        if "image" in fields:
            await uploads.discard_image(fields["image"])
        raise
    logger.info("Post %d updated by user %d (%s)", post.id, actor.id, ", ".join(fields) or "no fields")
    return _post_to_dict(post)


async def delete_post(db: AsyncSession, actor: User, post_id: int) -> None:
    post = await _get_or_404(db, post_id)
    if not permissions.can_delete_post(actor, post):
        raise Forbidden("You can only delete your own posts")

    await post_repository.delete(db, post)
    logger.info("Post %d deleted by user %d", post_id, actor.id)
