"""Pages controller — HTML routes for the admin view."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from starlette.concurrency import run_in_threadpool

from api.files.repositories.files_repository import FilesRepository
from api.files.services import files_service
from auth import require_admin
from cleanup import Reaper
from deps import get_reaper, get_repository
from templating import templates

router = APIRouter(tags=["Pages"])


@router.get("/admin", response_class=HTMLResponse, dependencies=[Depends(require_admin)])
async def dashboard(
    request: Request,
    repository: FilesRepository = Depends(get_repository),
    reaper: Reaper = Depends(get_reaper),
):
    files = await run_in_threadpool(files_service.list_files, repository)
    stats = await run_in_threadpool(files_service.get_stats, repository)
    last_report = reaper.last_report
    return templates.TemplateResponse(request, "admin.html", {
        "files": files,
        "stats": stats,
        "last_cleanup": last_report.finished_at if last_report else None,
    })
