from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from teamtasks.db.base import Base


class Membership(Base):
    """
    Association table linking Users to Teams with a role.

    Attributes:
        role: 'admin' or 'member' (see TeamRole)

    Every team keeps at least one admin membership; the endpoints enforce it.
    """
    __tablename__ = "memberships"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="member")
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'team_id', name='uq_membership_user_team'),
    )

    def __repr__(self):
        return f"<Membership(team_id={self.team_id}, user_id={self.user_id}, role='{self.role}')>"
