"""Download controller — shared links, password challenge and streaming."""

import mimetypes
import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from api.download.services import download_service
from api.download.services.download_service import AccessDecision, AccessResult
from api.files.dto.file import FileRecord
from api.files.repositories.files_repository import FilesRepository
from blob_store import BlobStore
from deps import get_blobs, get_hasher, get_repository
from security import PasswordHasher
from templating import templates

router = APIRouter(tags=["Download"])

CHUNK_SIZE = 1024 * 1024  # 1MB

MESSAGES = {
    AccessDecision.NOT_FOUND: ("File not found", 404),
    AccessDecision.EXPIRED: ("File expired", 410),
    AccessDecision.UNAUTHORIZED: ("Wrong password", 401),
}


def _content_disposition(name: str) -> str:
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", name)
    return f"attachment; filename=\"{fallback}\"; filename*=utf-8''{quote(name, safe='')}"


def _stream(blobs: BlobStore, record: FileRecord) -> StreamingResponse | PlainTextResponse:
    # Open now so a concurrent cleanup cannot pull the file out from under us
    try:
        handle = open(blobs.path_for(record.filename), "rb")
    except FileNotFoundError:
        return PlainTextResponse(*MESSAGES[AccessDecision.NOT_FOUND])

    content_type, _ = mimetypes.guess_type(record.original_name)
    if not content_type:
        content_type = "application/octet-stream"

    def iterfile():
        with handle:
            while chunk := handle.read(CHUNK_SIZE):
                yield chunk

    return StreamingResponse(
        iterfile(),
        media_type=content_type,
        headers={
            "Content-Disposition": _content_disposition(record.original_name),
            "Content-Length": str(record.size),
        },
    )


def _respond(request: Request, blobs: BlobStore, name: str, result: AccessResult):
    if result.decision is AccessDecision.SERVE:
        return _stream(blobs, result.record)
    if result.decision is AccessDecision.CHALLENGE:
        return templates.TemplateResponse(
            request,
            "challenge.html",
            {"action": request.url_for("verify_password", name=name).path},
        )
    message, status_code = MESSAGES[result.decision]
    return PlainTextResponse(message, status_code=status_code)


@router.get("/file/{name}", name="access_file")
async def access_file(
    request: Request,
    name: str,
    repository: FilesRepository = Depends(get_repository),
    blobs: BlobStore = Depends(get_blobs),
):
    """Serve the file, or ask for its password."""
    result = await run_in_threadpool(
        download_service.check_access, repository, blobs, name
    )
    return _respond(request, blobs, name, result)


@router.post("/verify/{name}", name="verify_password")
async def verify_password(
    request: Request,
    name: str,
    password: str = Form(""),
    repository: FilesRepository = Depends(get_repository),
    blobs: BlobStore = Depends(get_blobs),
    hasher: PasswordHasher = Depends(get_hasher),
):
    """Check the submitted password and stream the file on success."""
    result = await run_in_threadpool(
        download_service.verify, repository, blobs, hasher, name, password
    )
    return _respond(request, blobs, name, result)
