"""Files controller — admin API routes for stored files."""

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from api.files.dto.file import FileResponse, FileStats
from api.files.repositories.files_repository import FilesRepository
from api.files.services import files_service
from auth import require_admin
from deps import get_repository

router = APIRouter(
    prefix="/api/files", tags=["Files"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=list[FileResponse])
async def list_files(repository: FilesRepository = Depends(get_repository)):
    return await run_in_threadpool(files_service.list_files, repository)


@router.get("/stats", response_model=FileStats)
async def get_stats(repository: FilesRepository = Depends(get_repository)):
    return await run_in_threadpool(files_service.get_stats, repository)


@router.get("/{name}", response_model=FileResponse)
async def get_file(name: str, repository: FilesRepository = Depends(get_repository)):
    record = await run_in_threadpool(repository.find_by_filename, name)
    if not record:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse.from_record(record)
