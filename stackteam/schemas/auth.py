from typing import List
from pydantic import BaseModel, EmailStr, Field, field_validator

from stackteam.schemas.user import UserOut
from stackteam.schemas.team import TeamWithRole


class Login(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    """Token plus the authenticated user"""
    user: UserOut


class MeOut(BaseModel):
    user: UserOut
    teams: List[TeamWithRole] = []
