from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, UniqueConstraint
from datetime import datetime, timezone
from stackteam.db.base import Base


class Tag(Base):
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False, index=True)  # lowercased
    description = Column(Text, nullable=True)
    question_count = Column(Integer, default=0, nullable=False)  # denormalized
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint('team_id', 'name', name='uq_team_tag'),
    )

    def __repr__(self):
        return f"<Tag(team_id={self.team_id}, name='{self.name}', count={self.question_count})>"


class QuestionTag(Base):
    __tablename__ = "question_tags"
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True)
