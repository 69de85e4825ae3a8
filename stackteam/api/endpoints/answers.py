"""
Answers API Endpoints
"""

from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.user import User
from stackteam.schemas.answer import AnswerCreate, AnswerOut, AnswerSort, AnswerUpdate
from stackteam.schemas.common import Message
from stackteam.services.answers import AnswerService

router = APIRouter()


@router.get("/question/{question_id}", response_model=List[AnswerOut])
async def list_answers(
    question_id: int,
    sort: AnswerSort = Query(AnswerSort.SCORE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Answers to a question, accepted answer first, then by ``sort``."""
    views = await AnswerService(db).list_answers(current_user, question_id, sort=sort.value)
    answers = []
    for view in views:
        out = AnswerOut.model_validate(view.answer)
        out.user_vote = view.user_vote
        answers.append(out)
    return answers


@router.post("/", response_model=AnswerOut, status_code=status.HTTP_201_CREATED)
async def create_answer(
    payload: AnswerCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await AnswerService(db).create_answer(current_user, payload.question_id, payload.body)


@router.put("/{answer_id}", response_model=AnswerOut)
async def update_answer(
    answer_id: int,
    payload: AnswerUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await AnswerService(db).update_answer(current_user, answer_id, payload.body)


@router.delete("/{answer_id}", response_model=Message)
async def delete_answer(
    answer_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await AnswerService(db).delete_answer(current_user, answer_id)
    return Message(message="Answer deleted")


@router.post("/{answer_id}/accept", response_model=AnswerOut)
async def accept_answer(
    answer_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Mark an answer as accepted; any previously accepted answer is cleared."""
    return await AnswerService(db).accept_answer(current_user, answer_id)
