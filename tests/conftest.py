from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from api.files.repositories.files_repository import FilesRepository
from blob_store import BlobStore
from config import Settings
from database import Database
from main import create_app
from security import PasswordHasher


@pytest.fixture
def settings(tmp_path):
    return Settings(
        data_dir=tmp_path / "data",
        public_base_url="http://testserver",
        max_file_size=1024,
        bcrypt_rounds=4,
        cleanup_interval=3600,
    )


@pytest.fixture
def db(settings):
    database = Database(settings.db_url)
    database.init_db()
    yield database
    database.dispose()


@pytest.fixture
def repository(db):
    return FilesRepository(db.session_factory)


@pytest.fixture
def blobs(settings):
    return BlobStore(settings.files_dir, max_size=settings.max_file_size)


@pytest.fixture(scope="session")
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def store_file(repository, blobs):
    """Write a blob and its record directly, bypassing the upload route."""

    def _store(
        name: str = "1-abcd-a.txt",
        content: bytes = b"hello",
        password_hash: str | None = None,
        expires_at: datetime | None = None,
    ):
        blobs.root.mkdir(parents=True, exist_ok=True)
        path = blobs.root / name
        path.write_bytes(content)
        return repository.insert(
            filename=name,
            original_name=name.split("-", 2)[-1],
            filepath=str(path),
            size=len(content),
            password_hash=password_hash,
            expires_at=expires_at,
        )

    return _store


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
