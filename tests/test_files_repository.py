from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta, timezone

import pytest

from conftest import utcnow
from errors import DuplicateKeyError


def test_insert_and_find(repository):
    expires = utcnow() + timedelta(minutes=5)
    created = repository.insert(
        filename="1-aa-report.pdf",
        original_name="report.pdf",
        filepath="/tmp/1-aa-report.pdf",
        size=42,
        expires_at=expires,
    )

    found = repository.find_by_filename("1-aa-report.pdf")
    assert found is not None
    assert found.id == created.id
    assert found.original_name == "report.pdf"
    assert found.download_count == 0
    assert found.password_hash is None
    assert found.expires_at.tzinfo is not None
    assert abs(found.expires_at - expires) < timedelta(seconds=1)
    assert found.created_at.tzinfo == timezone.utc


def test_find_missing_returns_none(repository):
    assert repository.find_by_filename("nope") is None


def test_duplicate_filename_rejected(repository):
    repository.insert(filename="dup", original_name="a", filepath="/x/a", size=1)
    with pytest.raises(DuplicateKeyError):
        repository.insert(filename="dup", original_name="b", filepath="/x/b", size=1)
    assert len(repository.list_all()) == 1


def test_increment_downloads(repository):
    repository.insert(filename="f", original_name="f", filepath="/x/f", size=1)
    assert repository.increment_downloads("f") is True
    assert repository.increment_downloads("f") is True
    assert repository.find_by_filename("f").download_count == 2


def test_increment_missing_record_is_soft_failure(repository):
    assert repository.increment_downloads("gone") is False


def test_concurrent_increments_are_not_lost(repository):
    repository.insert(filename="hot", original_name="hot", filepath="/x/hot", size=1)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: repository.increment_downloads("hot"), range(40)))
    assert all(results)
    assert repository.find_by_filename("hot").download_count == 40


def test_delete_expired(repository):
    now = utcnow()
    repository.insert(filename="past", original_name="p", filepath="/x/p", size=1,
                      expires_at=now - timedelta(seconds=1))
    repository.insert(filename="edge", original_name="e", filepath="/x/e", size=1,
                      expires_at=now)
    repository.insert(filename="future", original_name="f", filepath="/x/f", size=1,
                      expires_at=now + timedelta(hours=1))
    repository.insert(filename="never", original_name="n", filepath="/x/n", size=1)

    assert repository.delete_expired(now) == 2
    remaining = {r.filename for r in repository.list_all()}
    assert remaining == {"future", "never"}


def test_list_all_newest_first(repository):
    for name in ("first", "second", "third"):
        repository.insert(filename=name, original_name=name, filepath=f"/x/{name}", size=1)
    assert [r.filename for r in repository.list_all()] == ["third", "second", "first"]


def test_filenames_and_total_storage(repository):
    repository.insert(filename="a", original_name="a", filepath="/x/a", size=10)
    repository.insert(filename="b", original_name="b", filepath="/x/b", size=5)
    assert repository.filenames() == {"a", "b"}
    assert repository.get_total_storage() == 15
