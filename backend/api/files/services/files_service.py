"""Files service — admin listing and statistics."""

from api.files.dto.file import FileResponse, FileStats
from api.files.repositories.files_repository import FilesRepository


def list_files(repository: FilesRepository) -> list[FileResponse]:
    return [FileResponse.from_record(r) for r in repository.list_all()]


def get_stats(repository: FilesRepository) -> FileStats:
    files = repository.list_all()
    return FileStats(
        total_files=len(files),
        total_storage=repository.get_total_storage(),
        total_downloads=sum(f.download_count for f in files),
    )
