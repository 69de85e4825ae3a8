"""
Question and Answer factories for test data generation.
"""

from datetime import datetime, timezone

import factory
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.models.answer import Answer
from stackteam.models.question import Question
from stackteam.services.tagging import attach_tags


class QuestionFactory(factory.Factory):
    """
    Factory for Question model.

    ``tags`` is not a column: the names are attached through the same helper
    the app uses, so tag counts stay consistent.
    """

    class Meta:
        model = Question

    team_id = None  # Must be set
    user_id = None  # Must be set
    title = factory.Faker("sentence", nb_words=6)
    body = factory.Faker("paragraph", nb_sentences=3)
    view_count = 0
    score = 0
    answer_count = 0
    is_closed = False

    @classmethod
    async def create_async(
        cls,
        db_session: AsyncSession,
        tags=None,
        **kwargs
    ) -> Question:
        """
        Create question in database asynchronously.

        Usage:
            q = await QuestionFactory.create_async(
                db_session,
                team_id=team.id,
                user_id=user.id,
                tags=["python", "fastapi"]
            )
        """
        for field in ("team_id", "user_id"):
            if kwargs.get(field) is None:
                raise ValueError(f"{field} is required for QuestionFactory")

        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        if tags:
            await attach_tags(db_session, instance, tags)
        return instance


class AnswerFactory(factory.Factory):
    """
    Factory for Answer model.

    Bumps the parent question's answer_count the way the app does.
    """

    class Meta:
        model = Answer

    question_id = None  # Must be set
    user_id = None  # Must be set
    body = factory.Faker("paragraph", nb_sentences=2)
    score = 0
    is_accepted = False

    @classmethod
    async def create_async(
        cls,
        db_session: AsyncSession,
        **kwargs
    ) -> Answer:
        for field in ("question_id", "user_id"):
            if kwargs.get(field) is None:
                raise ValueError(f"{field} is required for AnswerFactory")

        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        await db_session.execute(
            update(Question)
            .where(Question.id == instance.question_id)
            .values(answer_count=Question.answer_count + 1, last_activity_at=datetime.now(timezone.utc))
        )
        return instance
