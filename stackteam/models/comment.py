from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, Index
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from stackteam.db.base import Base
from stackteam.models.content_ref import ContentRef, content_kind_column_type


class Comment(Base):
    """Comment on a question or an answer (see ContentRef)."""
    __tablename__ = "comments"
    id = Column(Integer, primary_key=True, index=True)
    parent_type = Column(content_kind_column_type(), nullable=False)
    parent_id = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    author = relationship("User")

    __table_args__ = (
        Index("idx_comment_parent", "parent_type", "parent_id"),
    )

    @property
    def parent(self) -> ContentRef:
        return ContentRef(self.parent_type, self.parent_id)
