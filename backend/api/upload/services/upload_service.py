"""Upload service — handles file upload logic."""

import logging
import math
from datetime import datetime, timedelta, timezone

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from api.files.repositories.files_repository import FilesRepository
from api.upload.dto.upload import UploadResponse
from api.upload.services import link_service
from blob_store import BlobStore
from errors import StorageError
from security import PasswordHasher

logger = logging.getLogger(__name__)

# Ten years
MAX_EXPIRY_MINUTES = 10 * 365 * 24 * 60


def parse_expiry(expiry: str | None) -> float | None:
    """Parse the expiry form field (minutes). Empty means never expires."""
    if expiry is None or not expiry.strip():
        return None

    try:
        minutes = float(expiry)
    except ValueError:
        raise ValueError(f"Invalid expiry: {expiry!r}") from None

    if not math.isfinite(minutes) or minutes <= 0 or minutes > MAX_EXPIRY_MINUTES:
        raise ValueError(f"Expiry out of range: {expiry!r}")
    return minutes


async def save_upload(
    repository: FilesRepository,
    blobs: BlobStore,
    hasher: PasswordHasher,
    upload: UploadFile,
    base_url: str,
    password: str | None = None,
    expiry_minutes: float | None = None,
    now: datetime | None = None,
) -> UploadResponse:
    """Write the blob, then the record; undo the blob if the record fails."""
    now = now or datetime.now(timezone.utc)
    original_name = upload.filename or "file"
    key = blobs.new_key(original_name)

    blob = await blobs.put(upload, key)

    try:
        password_hash = (
            await run_in_threadpool(hasher.hash, password) if password else None
        )
        expires_at = now + timedelta(minutes=expiry_minutes) if expiry_minutes else None
        record = await run_in_threadpool(
            repository.insert,
            filename=key,
            original_name=original_name,
            filepath=str(blob.path),
            size=blob.size,
            password_hash=password_hash,
            expires_at=expires_at,
        )
    except Exception as e:
        blobs.remove(blob.path)
        if isinstance(e, StorageError):
            raise
        raise StorageError("Could not register upload") from e

    logger.info(
        "Stored %s (%d bytes, protected=%s, expires=%s)",
        record.filename,
        record.size,
        record.protected,
        record.expires_at.isoformat() if record.expires_at else "never",
    )

    url = link_service.build_url(base_url, record.filename)
    return UploadResponse(
        url=url,
        code=link_service.qr_data_uri(url),
        filename=record.filename,
        size=record.size,
        protected=record.protected,
        expires_at=record.expires_at,
    )
