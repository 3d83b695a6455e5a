"""File ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from database import Base


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the way SQLite stores it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class FileModel(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String, unique=True, nullable=False, index=True)
    original_name = Column(String, nullable=False)
    filepath = Column(String, nullable=False)
    size = Column(Integer, nullable=False, default=0)
    password_hash = Column(String, nullable=True)
    expires_at = Column(DateTime, nullable=True, index=True)
    download_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
