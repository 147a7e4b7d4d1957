from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, get_optional_user
from app.models import User
from app.schemas import MessageResponse
from app.services import post_service

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("")
async def list_posts(
    actor: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.list_posts(db, actor)


@router.get("/{post_id}")
async def get_post(
    post_id: int,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_post(db, post_id)


@router.post("", status_code=201)
async def create_post(
    title: str = Form(""),
    content: str = Form(""),
    image: UploadFile | None = File(None),
    actor: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.create_post(db, actor, title, content, image)


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    title: str = Form(""),
    content: str = Form(""),
    image: UploadFile | None = File(None),
    actor: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.update_post(db, actor, post_id, title, content, image)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    actor: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await post_service.delete_post(db, actor, post_id)
    return {"message": "Post deleted successfully"}
