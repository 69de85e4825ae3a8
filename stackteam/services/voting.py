"""
Voting and score ledger.

Transitions per (voter, target):

    none -> up      add,    +1
    none -> down    add,    -1
    up   -> up      remove, -1
    down -> down    remove, +1
    up  <-> down    update, +2 / -2

The target's score only ever moves by ``score = score + delta`` in SQL, and
the voter's existing vote row is locked for the duration of the change.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.core.exceptions import ValidationError
from stackteam.core.permissions import Action, Resource
from stackteam.db.session import transaction
from stackteam.models.answer import Answer
from stackteam.models.content_ref import ContentRef
from stackteam.models.notification import NotificationType
from stackteam.models.question import Question
from stackteam.models.user import User
from stackteam.models.vote import Vote
from stackteam.services.access import require_member, require_permission, resolve_content, touch_question
from stackteam.services.notifications import NotificationSink

UP = "up"
DOWN = "down"


@dataclass
class VoteOutcome:
    action: str  # added, removed or updated
    vote_type: Optional[str]
    score: int


def vote_transition(current: Optional[str], requested: str):
    """
    Return (action, resulting vote, score delta) for a vote request.
    """
    sign = 1 if requested == UP else -1
    if current is None:
        return "added", requested, sign
    if current == requested:
        return "removed", None, -sign
    return "updated", requested, 2 * sign


class VotingService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._notifier = NotificationSink(session)

    async def _existing(self, actor: User, target: ContentRef, lock: bool = False) -> Optional[Vote]:
        query = select(Vote).where(
            Vote.votable_type == target.kind,
            Vote.votable_id == target.id,
            Vote.user_id == actor.id,
        )
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        return (await self._session.execute(query)).scalar_one_or_none()

    async def cast_vote(self, actor: User, target: ContentRef, vote_type: str) -> VoteOutcome:
        if vote_type not in (UP, DOWN):
            raise ValidationError("vote_type must be up or down")

        model = Question if target.is_question else Answer
        async with transaction(self._session):
            owner = await resolve_content(self._session, target)
            await require_permission(self._session, actor, owner.team_id, Resource.VOTE, Action.CREATE)

            existing = await self._existing(actor, target, lock=True)
            action, result_type, delta = vote_transition(existing.vote_type if existing else None, vote_type)

            if action == "added":
                self._session.add(Vote(
                    votable_type=target.kind,
                    votable_id=target.id,
                    user_id=actor.id,
                    vote_type=vote_type,
                ))
            elif action == "removed":
                await self._session.delete(existing)
            else:
                existing.vote_type = vote_type
            await self._session.flush()

            await self._session.execute(
                update(model)
                .where(model.id == target.id)
                .values(score=model.score + delta)
                .execution_options(synchronize_session=False)
            )
            await touch_question(self._session, owner.question_id)
            score = await self._session.scalar(select(model.score).where(model.id == target.id))

        if result_type == UP:
            await self._notifier.notify(
                owner.author_id,
                actor.id,
                NotificationType.UPVOTE,
                question_id=owner.question_id,
                answer_id=owner.answer_id,
            )
        return VoteOutcome(action=action, vote_type=result_type, score=score)

    async def get_vote(self, actor: User, target: ContentRef) -> Optional[str]:
        owner = await resolve_content(self._session, target)
        await require_member(self._session, actor, owner.team_id)
        existing = await self._existing(actor, target)
        return existing.vote_type if existing else None
