from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from datetime import datetime, timezone
from teamtasks.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    avatar_url = Column(String(500), nullable=True)

    # Profile
    bio = Column(Text, nullable=True)
    timezone = Column(String(50), default="America/New_York")
    language = Column(String(10), default="en")
    theme = Column(String(20), default="light")
    notifications = Column(JSON, default=dict)  # notification preferences
    privacy = Column(JSON, default=dict)
    location = Column(String(100), nullable=True)
    job_title = Column(String(100), nullable=True)
    company = Column(String(100), nullable=True)
    website = Column(String(200), nullable=True)
    phone = Column(String(20), nullable=True)

    last_login_at = Column(DateTime(timezone=True), nullable=True)
    token_version = Column(Integer, default=1, nullable=False)  # invalidates session cookies
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
