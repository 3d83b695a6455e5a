"""Upload controller — handles multipart file uploads."""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import PlainTextResponse

from api.files.repositories.files_repository import FilesRepository
from api.upload.dto.upload import UploadResponse
from api.upload.services import link_service, upload_service
from blob_store import BlobStore
from config import Settings
from deps import get_blobs, get_hasher, get_repository, get_settings
from errors import SizeExceededError, StorageError
from security import PasswordHasher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])

UPLOAD_FAILED = "Upload failed"

# Room for multipart boundaries, part headers and the password/expiry fields
MULTIPART_OVERHEAD = 64 * 1024


async def reject_oversized_upload(request: Request, call_next):
    """Refuse an upload by its Content-Length before the body is spooled."""
    if request.method == "POST" and request.url.path == "/upload":
        settings: Settings = request.app.state.settings
        length = request.headers.get("content-length", "")
        if (
            settings.max_file_size
            and length.isdigit()
            and int(length) > settings.max_file_size + MULTIPART_OVERHEAD
        ):
            logger.info("Rejected upload of %s bytes before reading it", length)
            return PlainTextResponse(UPLOAD_FAILED, status_code=413)
    return await call_next(request)


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    password: str = Form(""),
    expiry: str = Form(""),
    settings: Settings = Depends(get_settings),
    repository: FilesRepository = Depends(get_repository),
    blobs: BlobStore = Depends(get_blobs),
    hasher: PasswordHasher = Depends(get_hasher),
):
    """Store a file and return its share link and QR code."""
    try:
        expiry_minutes = upload_service.parse_expiry(expiry)
    except ValueError as e:
        logger.info("Rejected upload: %s", e)
        return PlainTextResponse(UPLOAD_FAILED, status_code=400)

    base_url = link_service.resolve_base_url(
        str(request.base_url), settings.public_base_url
    )

    try:
        return await upload_service.save_upload(
            repository=repository,
            blobs=blobs,
            hasher=hasher,
            upload=file,
            base_url=base_url,
            password=password or None,
            expiry_minutes=expiry_minutes,
        )
    except SizeExceededError as e:
        logger.info("Rejected upload %r: %s", file.filename, e)
        return PlainTextResponse(UPLOAD_FAILED, status_code=413)
    except StorageError:
        logger.exception("Upload of %r failed", file.filename)
        return PlainTextResponse(UPLOAD_FAILED, status_code=500)
