from datetime import datetime, timedelta, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship

from stackteam.core.config import settings
from stackteam.db.base import Base


def ensure_aware(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; all stored values are UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def default_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=settings.INVITE_EXPIRE_DAYS)


class TeamInvite(Base):
    """
    Single-use, time-limited invitation of an email address to a team.

    Attributes:
        status: 'pending', 'accepted', 'expired' or 'cancelled'
        expires_at: Past this instant the invite is expired whatever the stored status
    """
    __tablename__ = "team_invites"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)  # stored lowercased
    invited_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(64), unique=True, index=True, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    expires_at = Column(DateTime(timezone=True), nullable=False, default=default_expiry)

    team = relationship("Team", back_populates="invites")
    inviter = relationship("User", foreign_keys=[invited_by])

    def __repr__(self):
        return f"<TeamInvite(id={self.id}, team_id={self.team_id}, status='{self.status}')>"

    def is_expired(self, now: datetime = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now > ensure_aware(self.expires_at)

    @property
    def effective_status(self) -> str:
        if self.status == "pending" and self.is_expired():
            return "expired"
        return self.status
