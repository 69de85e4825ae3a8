from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.content_ref import ContentKind, ContentRef
from stackteam.models.user import User
from stackteam.schemas.vote import VoteCreate, VoteResult, VoteState
from stackteam.services.voting import VotingService

router = APIRouter()


@router.post("/", response_model=VoteResult)
async def cast_vote(
    payload: VoteCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Vote on a question or answer.

    Repeating the same vote removes it; the opposite vote switches it.
    """
    outcome = await VotingService(db).cast_vote(current_user, payload.target, payload.vote_type)
    return VoteResult(action=outcome.action, vote_type=outcome.vote_type, score=outcome.score)


@router.get("/", response_model=VoteState)
async def get_vote(
    votable_type: ContentKind = Query(...),
    votable_id: int = Query(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    vote_type = await VotingService(db).get_vote(current_user, ContentRef(votable_type, votable_id))
    return VoteState(vote_type=vote_type)
