from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from teamtasks.db.base import Base


class UserSession(Base):
    """
    Server-side login session.

    The cookie only carries a signed reference to ``sid``; deleting the row
    (logout) revokes the cookie immediately.
    """
    __tablename__ = "sessions"

    sid = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expire = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<UserSession(user_id={self.user_id}, expire={self.expire})>"
