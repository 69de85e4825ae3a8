from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.content_ref import ContentKind, ContentRef
from stackteam.models.user import User
from stackteam.schemas.comment import CommentCreate, CommentOut
from stackteam.schemas.common import Message
from stackteam.services.comments import CommentService

router = APIRouter()


@router.get("/", response_model=List[CommentOut])
async def list_comments(
    parent_type: ContentKind = Query(...),
    parent_id: int = Query(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await CommentService(db).list_comments(current_user, ContentRef(parent_type, parent_id))


@router.post("/", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def create_comment(
    payload: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await CommentService(db).create_comment(current_user, payload.parent, payload.body)


@router.delete("/{comment_id}", response_model=Message)
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await CommentService(db).delete_comment(current_user, comment_id)
    return Message(message="Comment deleted")
