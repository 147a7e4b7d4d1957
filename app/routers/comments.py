from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas import CommentCreate, CommentUpdate, MessageResponse
from app.services import comment_service

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/post/{post_id}")
async def list_comments(post_id: int, db: AsyncSession = Depends(get_db)):
    return await comment_service.list_comments(db, post_id)


@router.post("", status_code=201)
async def create_comment(
    data: CommentCreate,
    actor: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.create_comment(db, actor, data.post_id, data.content)


@router.put("/{comment_id}")
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    actor: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.update_comment(db, actor, comment_id, data.content)


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    actor: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, actor, comment_id)
    return {"message": "Comment deleted successfully"}
