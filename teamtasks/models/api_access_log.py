from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, BigInteger, ForeignKey, DateTime, Text
from teamtasks.db.base import Base


class APIAccessLog(Base):
    """
    API access logging for audit.

    Tracks API requests with user context, performance metrics,
    and request/response metadata.
    """
    __tablename__ = "api_access_logs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)

    # User/Team context
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    team_id = Column(Integer, nullable=True, index=True)  # taken from the path, may point at a deleted team

    # Request information
    endpoint = Column(String(255), nullable=False, index=True)
    method = Column(String(10), nullable=False)
    status_code = Column(Integer, nullable=False)

    # Client information
    ip_address = Column(String(45), nullable=True)  # IPv6 compatible
    user_agent = Column(Text, nullable=True)

    request_id = Column(String(36), nullable=True, unique=True, index=True)
    duration_ms = Column(Integer, nullable=True)
    request_body_hash = Column(String(64), nullable=True)  # SHA256 of request body
    response_size = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    def __repr__(self):
        return f"<APIAccessLog(id={self.id}, endpoint='{self.endpoint}', method='{self.method}', status={self.status_code})>"
