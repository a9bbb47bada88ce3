from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, Integer, String, ForeignKey, DateTime, Text, Index
from teamtasks.db.base import Base


class Notification(Base):
    """
    Per-user notification produced as a side effect of task events.

    Only the recipient may mark it read; notifications are never deleted.
    """
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)  # see NotificationType
    related_id = Column(Integer, nullable=True)  # task id, team id...
    related_type = Column(String(50), nullable=True)  # 'task', 'team'
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_notifications_user_id_read", "user_id", "read"),
    )

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}', read={self.read})>"
