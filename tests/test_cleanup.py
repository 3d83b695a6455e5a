import asyncio
import logging
import os
import time
from datetime import timedelta

from blob_store import BlobStore
from cleanup import CleanupReport, Reaper, run_cleanup
from conftest import utcnow


def test_run_cleanup_deletes_only_expired(repository, blobs, store_file):
    now = utcnow()
    store_file("1-aa-old.txt", expires_at=now + timedelta(minutes=1))
    store_file("1-bb-keep.txt", expires_at=now + timedelta(hours=1))
    store_file("1-cc-never.txt")

    report = run_cleanup(repository, blobs, now=now + timedelta(seconds=61))

    assert report.deleted_records == 1
    assert repository.find_by_filename("1-aa-old.txt") is None
    assert repository.find_by_filename("1-bb-keep.txt") is not None
    assert repository.find_by_filename("1-cc-never.txt") is not None


def test_run_cleanup_before_expiry_keeps_record(repository, blobs, store_file):
    store_file("1-aa-a.txt", expires_at=utcnow() + timedelta(minutes=1))
    assert run_cleanup(repository, blobs).deleted_records == 0
    assert repository.find_by_filename("1-aa-a.txt") is not None


def test_orphan_sweep_respects_grace_period(repository, blobs, store_file):
    kept = store_file("1-aa-kept.txt")
    old_orphan = blobs.root / "1-bb-old-orphan.txt"
    new_orphan = blobs.root / "1-cc-new-orphan.txt"
    old_orphan.write_bytes(b"x")
    new_orphan.write_bytes(b"y")
    an_hour_ago = time.time() - 3600
    os.utime(old_orphan, (an_hour_ago, an_hour_ago))
    os.utime(kept.filepath, (an_hour_ago, an_hour_ago))

    report = run_cleanup(repository, blobs, orphan_grace=300)

    assert report.removed_blobs == 1
    assert not old_orphan.exists()
    assert new_orphan.exists()
    assert blobs.exists(kept.filepath)


def test_orphan_sweep_through_symlinked_root(repository, blobs, store_file, tmp_path):
    record = store_file("1-aa-live.txt")
    an_hour_ago = time.time() - 3600
    os.utime(record.filepath, (an_hour_ago, an_hour_ago))
    link = tmp_path / "data-link"
    link.symlink_to(blobs.root.parent, target_is_directory=True)

    report = run_cleanup(repository, BlobStore(link / "files"), orphan_grace=300)

    assert report.removed_blobs == 0
    assert os.path.exists(record.filepath)
    assert repository.find_by_filename("1-aa-live.txt") is not None


def test_expired_blob_removed_once_unreferenced(repository, blobs, store_file):
    record = store_file(expires_at=utcnow() - timedelta(minutes=1))
    an_hour_ago = time.time() - 3600
    os.utime(record.filepath, (an_hour_ago, an_hour_ago))

    report = run_cleanup(repository, blobs, orphan_grace=0)

    assert report.deleted_records == 1
    assert report.removed_blobs == 1
    assert not blobs.exists(record.filepath)


def test_orphan_sweep_can_be_disabled(repository, blobs, store_file):
    record = store_file(expires_at=utcnow() - timedelta(minutes=1))
    report = run_cleanup(repository, blobs, sweep_orphans=False, orphan_grace=0)
    assert report.removed_blobs == 0
    assert blobs.exists(record.filepath)


def test_reaper_swallows_failures(caplog):
    def boom():
        raise RuntimeError("database unreachable")

    reaper = Reaper(60, boom)
    with caplog.at_level(logging.ERROR, logger="cleanup"):
        assert asyncio.run(reaper.run_once()) is None
    assert "Cleanup failed" in caplog.text
    assert reaper.last_report is None


def test_reaper_ticks_until_stopped():
    ticks = []

    def tick():
        ticks.append(1)
        if len(ticks) == 1:
            raise RuntimeError("first tick fails")
        return CleanupReport(deleted_records=0, removed_blobs=0, finished_at=utcnow())

    async def scenario():
        reaper = Reaper(0.01, tick)
        reaper.start()
        assert reaper.running
        await asyncio.sleep(0.2)
        await reaper.stop()
        assert not reaper.running
        return reaper

    reaper = asyncio.run(scenario())
    assert len(ticks) >= 2
    assert reaper.last_report is not None
