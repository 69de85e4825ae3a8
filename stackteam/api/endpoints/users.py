"""
Users API Endpoints

Profile lookup and editing, password change, and member search for mentions.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.api.endpoints.auth import set_auth_cookie
from stackteam.models.user import User
from stackteam.schemas.auth import Token
from stackteam.schemas.profile import UserAnswerOut, UserProfileOut
from stackteam.schemas.question import QuestionOut
from stackteam.schemas.team import team_with_role
from stackteam.schemas.user import PasswordChange, ProfileUpdate, UserOut, UserSummary
from stackteam.services.users import UserService

router = APIRouter()


@router.get("/search", response_model=List[UserSummary])
async def search_users(
    team_id: int = Query(...),
    q: Optional[str] = Query(None, max_length=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Team members matching ``q``; at most 10."""
    return await UserService(db).search_users(current_user, team_id, q)


@router.put("/profile", response_model=UserOut)
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await UserService(db).update_profile(current_user, payload.model_dump(exclude_unset=True))


@router.put("/password", response_model=Token)
async def change_password(
    payload: PasswordChange,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Change the password. Every previously issued token stops working; the
    response carries a fresh one.
    """
    token = await UserService(db).change_password(current_user, payload.current_password, payload.new_password)
    set_auth_cookie(response, token)
    return Token(access_token=token)


@router.get("/{user_id}", response_model=UserProfileOut)
async def get_user(
    user_id: int,
    team_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await UserService(db).get_user(current_user, user_id, team_id)
    return UserProfileOut(
        **UserOut.model_validate(profile.user).model_dump(),
        teams=[team_with_role(team, member) for team, member in profile.teams],
        questions=[QuestionOut.model_validate(q) for q in profile.questions],
        answers=[
            UserAnswerOut(
                id=answer.id,
                question_id=answer.question_id,
                question_title=title,
                score=answer.score,
                is_accepted=answer.is_accepted,
                created_at=answer.created_at,
            )
            for answer, title in profile.answers
        ],
    )
