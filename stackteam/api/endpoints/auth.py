"""
Authentication endpoints.

    - /register: Creates an account and signs it in.
    - /login: Authenticates with a JSON body and issues a JWT access token.
    - /token: OAuth2 password form used by the Swagger "Authorize" button.
    - /logout: Revokes the presented token and clears the cookie.
    - /me: The current user and the teams they belong to.

Tokens are returned in the body and also set as an HTTP-only cookie.
"""
from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm
import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import (
    ACCESS_TOKEN_COOKIE,
    get_current_user,
    get_db,
    get_redis,
    get_token,
)
from stackteam.core.config import settings
from stackteam.models.user import User
from stackteam.schemas.auth import AuthResponse, Login, MeOut, Token
from stackteam.schemas.common import Message
from stackteam.schemas.team import team_with_role
from stackteam.schemas.user import UserCreate, UserOut
from stackteam.services.membership import MembershipEngine
from stackteam.services.tokens import TokenBlacklist
from stackteam.services.users import UserService

router = APIRouter()


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, response: Response, db: AsyncSession = Depends(get_db)):
    user, token = await UserService(db).register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        work_type=payload.work_type,
        job_role=payload.job_role,
    )
    set_auth_cookie(response, token)
    return AuthResponse(access_token=token, user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(payload: Login, response: Response, db: AsyncSession = Depends(get_db)):
    user, token = await UserService(db).login(payload.email, payload.password)
    set_auth_cookie(response, token)
    return AuthResponse(access_token=token, user=UserOut.model_validate(user))


@router.post("/token", response_model=Token)
async def oauth2_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """
    Standard OAuth2 password flow; the ``username`` field carries the email.
    """
    _, token = await UserService(db).login(form_data.username, form_data.password)
    return Token(access_token=token)


@router.post("/logout", response_model=Message)
async def logout(
    response: Response,
    token: str = Depends(get_token),
    current_user: User = Depends(get_current_user),
    redis: aioredis.Redis = Depends(get_redis),
):
    await TokenBlacklist(redis).revoke(token)
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return Message(message="Logout successful")


@router.get("/me", response_model=MeOut)
async def read_me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    teams = await MembershipEngine(db).list_my_teams(current_user)
    return MeOut(
        user=UserOut.model_validate(current_user),
        teams=[team_with_role(team, member) for team, member in teams],
    )
