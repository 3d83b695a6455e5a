"""Linkdrop — Main application entry point."""

import logging
from contextlib import asynccontextmanager
from functools import partial

from fastapi import FastAPI

from api.download.controllers.download_controller import router as download_router
from api.files.controllers.files_controller import router as files_router
from api.files.repositories.files_repository import FilesRepository
from api.pages.controllers.pages_controller import router as pages_router
from api.upload.controllers.upload_controller import reject_oversized_upload
from api.upload.controllers.upload_controller import router as upload_router
from api.upload.services.link_service import get_local_ip
from blob_store import BlobStore
from cleanup import Reaper, run_cleanup
from config import Settings, configure_logging, load_settings
from database import Database
from security import PasswordHasher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    db = Database(settings.db_url)
    db.run_migrations()

    repository = FilesRepository(db.session_factory)
    blobs = BlobStore(settings.files_dir, max_size=settings.max_file_size)
    reaper = Reaper(
        settings.cleanup_interval,
        partial(run_cleanup, repository, blobs, sweep_orphans=settings.cleanup_orphans),
    )

    app.state.db = db
    app.state.repository = repository
    app.state.blobs = blobs
    app.state.hasher = PasswordHasher(settings.bcrypt_rounds)
    app.state.reaper = reaper

    reaper.start()
    logger.info("Linkdrop ready, cleanup every %ss", settings.cleanup_interval)
    try:
        yield
    finally:
        await reaper.stop()
        db.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(title="Linkdrop", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings or load_settings()
    configure_logging(app.state.settings.log_level)

    app.middleware("http")(reject_oversized_upload)

    # Router registration order matters:
    # 1. Health check
    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    # 2. API routers (prefixed)
    app.include_router(files_router)

    # 3. Pages, upload and shared links
    app.include_router(pages_router)
    app.include_router(upload_router)
    app.include_router(download_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.settings
    logger.info("Local   : http://localhost:%s", settings.port)
    logger.info("Network : http://%s:%s", get_local_ip(), settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
