from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.user import User
from stackteam.schemas.tag import TagOut
from stackteam.services.tagging import TagService

router = APIRouter()


@router.get("/", response_model=List[TagOut])
async def list_tags(
    team_id: int = Query(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Team tags, most used first."""
    return await TagService(db).list_tags(current_user, team_id)


@router.get("/search", response_model=List[TagOut])
async def search_tags(
    team_id: int = Query(...),
    q: str = Query(..., min_length=1, max_length=50),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await TagService(db).search_tags(current_user, team_id, q)
