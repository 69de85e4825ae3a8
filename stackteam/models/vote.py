from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, Index
from datetime import datetime, timezone
from stackteam.db.base import Base
from stackteam.models.content_ref import ContentRef, content_kind_column_type


class Vote(Base):
    """
    One voter's vote on a question or an answer.

    Attributes:
        vote_type: 'up' or 'down'
    """
    __tablename__ = "votes"
    id = Column(Integer, primary_key=True, index=True)
    votable_type = Column(content_kind_column_type(), nullable=False)
    votable_id = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    vote_type = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint('votable_type', 'votable_id', 'user_id', name='uq_vote'),
        Index("idx_votable", "votable_type", "votable_id"),
    )

    @property
    def target(self) -> ContentRef:
        return ContentRef(self.votable_type, self.votable_id)
