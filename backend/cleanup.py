"""Cleanup — removes expired files.

Runs every ``CLEANUP_INTERVAL`` seconds inside the app.
Run standalone for a single pass: python cleanup.py
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from api.files.repositories.files_repository import FilesRepository
from blob_store import BlobStore

logger = logging.getLogger(__name__)

# Unreferenced blobs younger than this may belong to an upload in progress
ORPHAN_GRACE_SECONDS = 300


@dataclass(frozen=True)
class CleanupReport:
    deleted_records: int
    removed_blobs: int
    finished_at: datetime


def run_cleanup(
    repository: FilesRepository,
    blobs: BlobStore,
    now: datetime | None = None,
    sweep_orphans: bool = True,
    orphan_grace: float = ORPHAN_GRACE_SECONDS,
) -> CleanupReport:
    """Delete expired records and, optionally, blobs no record points to."""
    now = now or datetime.now(timezone.utc)

    # Expired files
    deleted = repository.delete_expired(now)

    # Orphaned blobs (on disk but not in DB)
    removed = 0
    if sweep_orphans:
        referenced = repository.filenames()
        cutoff = time.time() - orphan_grace
        for path in blobs.iter_blobs():
            if path.name in referenced:
                continue
            try:
                if path.stat().st_mtime > cutoff:
                    continue
            except FileNotFoundError:
                continue
            if blobs.remove(path):
                removed += 1

    return CleanupReport(
        deleted_records=deleted,
        removed_blobs=removed,
        finished_at=datetime.now(timezone.utc),
    )


class Reaper:
    """Runs ``tick`` on a fixed interval until stopped.

    A failing tick is logged and the loop carries on; the next tick is the
    retry.
    """

    def __init__(self, interval: float, tick: Callable[[], CleanupReport]):
        self.interval = interval
        self._tick = tick
        self._task: asyncio.Task | None = None
        self.last_report: CleanupReport | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> CleanupReport | None:
        try:
            report = await asyncio.to_thread(self._tick)
        except Exception:
            logger.exception("Cleanup failed, retrying in %ss", self.interval)
            return None

        self.last_report = report
        if report.deleted_records or report.removed_blobs:
            logger.info(
                "Cleaned up %d expired record(s), %d orphaned blob(s)",
                report.deleted_records,
                report.removed_blobs,
            )
        return report

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="cleanup")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None


if __name__ == "__main__":
    from config import configure_logging, load_settings
    from database import Database

    settings = load_settings()
    configure_logging(settings.log_level)
    db = Database(settings.db_url)
    db.run_migrations()
    try:
        report = run_cleanup(
            FilesRepository(db.session_factory),
            BlobStore(settings.files_dir),
            sweep_orphans=settings.cleanup_orphans,
        )
        logger.info(
            "Cleanup done: %d record(s), %d blob(s)",
            report.deleted_records,
            report.removed_blobs,
        )
    finally:
        db.dispose()
