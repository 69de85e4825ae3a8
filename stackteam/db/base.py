from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import models so they register with Base
from stackteam.models import (  # noqa: E402,F401
    user,
    team,
    team_member,
    team_invite,
    question,
    answer,
    comment,
    vote,
    tag,
    bookmark,
    notification,
)
