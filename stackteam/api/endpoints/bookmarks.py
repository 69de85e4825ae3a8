from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.user import User
from stackteam.schemas.bookmark import BookmarkedQuestion, BookmarkState, BookmarkToggle
from stackteam.schemas.question import QuestionOut
from stackteam.services.bookmarks import BookmarkService

router = APIRouter()


@router.post("/", response_model=BookmarkState)
async def toggle_bookmark(
    payload: BookmarkToggle,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Bookmark a question, or remove the bookmark if it exists."""
    bookmarked = await BookmarkService(db).toggle(current_user, payload.question_id)
    return BookmarkState(bookmarked=bookmarked)


@router.get("/check", response_model=BookmarkState)
async def check_bookmark(
    question_id: int = Query(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return BookmarkState(bookmarked=await BookmarkService(db).check(current_user, question_id))


@router.get("/", response_model=List[BookmarkedQuestion])
async def list_bookmarks(
    team_id: int = Query(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    entries = await BookmarkService(db).list(current_user, team_id)
    return [
        BookmarkedQuestion(
            **QuestionOut.model_validate(entry.question).model_dump(),
            bookmarked_at=entry.bookmarked_at,
            has_accepted_answer=entry.has_accepted_answer,
        )
        for entry in entries
    ]
