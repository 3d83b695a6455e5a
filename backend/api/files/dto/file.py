"""File Data Transfer Objects."""

from datetime import datetime, timezone

from pydantic import BaseModel


class FileRecord(BaseModel):
    """Internal view of a stored file, including its storage details."""

    id: int
    filename: str
    original_name: str
    filepath: str
    size: int
    password_hash: str | None = None
    expires_at: datetime | None = None
    download_count: int = 0
    created_at: datetime

    @property
    def protected(self) -> bool:
        return self.password_hash is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        """True once ``expires_at`` is set and not after ``now``."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now


class FileResponse(BaseModel):
    """Public/admin view; never carries the password hash or storage path."""

    filename: str
    original_name: str
    size: int
    protected: bool
    download_count: int
    expires_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileResponse":
        return cls(
            filename=record.filename,
            original_name=record.original_name,
            size=record.size,
            protected=record.protected,
            download_count=record.download_count,
            expires_at=record.expires_at,
            created_at=record.created_at,
        )


class FileStats(BaseModel):
    total_files: int
    total_storage: int
    total_downloads: int
