from sqlalchemy import Boolean, Column, Integer, String, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from stackteam.db.base import Base


class Question(Base):
    __tablename__ = "questions"
    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    body = Column(Text, nullable=False)
    view_count = Column(Integer, default=0, nullable=False)
    score = Column(Integer, default=0, nullable=False, index=True)
    answer_count = Column(Integer, default=0, nullable=False)  # denormalized
    is_closed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
    last_activity_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    author = relationship("User")
    team = relationship("Team")
    tags = relationship("Tag", secondary="question_tags", viewonly=True, order_by="Tag.name")

    def __repr__(self):
        return f"<Question(id={self.id}, team_id={self.team_id})>"
