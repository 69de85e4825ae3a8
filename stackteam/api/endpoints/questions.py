"""
Questions API Endpoints

Listing with filters/sorting/pagination, reading (counts a view), asking,
editing, closing and deleting questions.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.user import User
from stackteam.schemas.common import Message
from stackteam.schemas.question import (
    QuestionCreate,
    QuestionDetail,
    QuestionFilter,
    QuestionList,
    QuestionOut,
    QuestionSort,
    QuestionUpdate,
)
from stackteam.services.questions import QuestionService

router = APIRouter()


@router.get("/", response_model=QuestionList)
async def list_questions(
    team_id: int = Query(...),
    sort: QuestionSort = Query(QuestionSort.ACTIVE),
    filter: Optional[QuestionFilter] = Query(None),
    tag: Optional[str] = Query(None, max_length=50),
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List a team's questions.

    Query parameters:
    - sort: newest, active (default), score or frequent
    - filter: no-answers or unanswered
    - tag: exact tag name
    - search: substring of title or body
    - page / limit: pagination
    """
    result = await QuestionService(db).list_questions(
        current_user,
        team_id,
        sort=sort.value,
        filter=filter.value if filter else None,
        tag=tag,
        search=search,
        page=page,
        limit=limit,
    )
    return QuestionList(
        questions=[QuestionOut.model_validate(q) for q in result.questions],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.post("/", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
async def create_question(
    payload: QuestionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await QuestionService(db).create_question(
        current_user,
        payload.team_id,
        title=payload.title,
        body=payload.body,
        tags=payload.tags,
        mention_user_ids=payload.mention_user_ids,
    )


@router.get("/{question_id}", response_model=QuestionDetail)
async def get_question(
    question_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    view = await QuestionService(db).get_question(current_user, question_id)
    detail = QuestionDetail.model_validate(view.question)
    detail.user_vote = view.user_vote
    return detail


@router.put("/{question_id}", response_model=QuestionOut)
async def update_question(
    question_id: int,
    payload: QuestionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Edit title, body or tags. Author only."""
    return await QuestionService(db).update_question(
        current_user,
        question_id,
        title=payload.title,
        body=payload.body,
        tags=payload.tags,
    )


@router.delete("/{question_id}", response_model=Message)
async def delete_question(
    question_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a question and everything attached to it. Author or team admin."""
    await QuestionService(db).delete_question(current_user, question_id)
    return Message(message="Question deleted")


@router.post("/{question_id}/close", response_model=QuestionOut)
async def close_question(
    question_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await QuestionService(db).close_question(current_user, question_id)


@router.post("/{question_id}/reopen", response_model=QuestionOut)
async def reopen_question(
    question_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await QuestionService(db).reopen_question(current_user, question_id)
