"""Upload Data Transfer Objects."""

from datetime import datetime

from pydantic import BaseModel


class UploadResponse(BaseModel):
    url: str
    code: str
    filename: str
    size: int
    protected: bool = False
    expires_at: datetime | None = None
