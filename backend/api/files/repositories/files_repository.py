"""Files repository — data access layer."""

from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from api.files.dto.file import FileRecord
from api.files.orm.file_model import FileModel
from errors import DuplicateKeyError, StorageError


def _to_db_time(dt: datetime | None) -> datetime | None:
    """Normalize to naive UTC for storage and comparison."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _from_db_time(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _model_to_record(model: FileModel) -> FileRecord:
    return FileRecord(
        id=model.id,
        filename=model.filename,
        original_name=model.original_name,
        filepath=model.filepath,
        size=model.size or 0,
        password_hash=model.password_hash,
        expires_at=_from_db_time(model.expires_at),
        download_count=model.download_count or 0,
        created_at=_from_db_time(model.created_at),
    )


class FilesRepository:
    """Record store for uploaded files.

    Every method opens its own short-lived session, so one repository can be
    shared between request handlers and the reaper thread.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()

    def insert(
        self,
        filename: str,
        original_name: str,
        filepath: str,
        size: int,
        password_hash: str | None = None,
        expires_at: datetime | None = None,
    ) -> FileRecord:
        with self._get_session() as session:
            model = FileModel(
                filename=filename,
                original_name=original_name,
                filepath=filepath,
                size=size,
                password_hash=password_hash,
                expires_at=_to_db_time(expires_at),
            )
            session.add(model)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateKeyError(f"Filename already exists: {filename}") from e
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageError("Could not save file record") from e
            session.refresh(model)
            return _model_to_record(model)

    def find_by_filename(self, filename: str) -> FileRecord | None:
        try:
            with self._get_session() as session:
                model = session.scalars(
                    select(FileModel).filter_by(filename=filename)
                ).first()
                return _model_to_record(model) if model else None
        except SQLAlchemyError as e:
            raise StorageError("Could not read file record") from e

    def increment_downloads(self, filename: str) -> bool:
        """Atomically bump the counter. Returns False if the row is gone."""
        try:
            with self._get_session() as session:
                result = session.execute(
                    update(FileModel)
                    .where(FileModel.filename == filename)
                    .values(download_count=FileModel.download_count + 1)
                )
                session.commit()
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise StorageError("Could not update download count") from e

    def delete_expired(self, now: datetime | None = None) -> int:
        """Delete every record whose expiry is set and not after ``now``."""
        now = _to_db_time(now or datetime.now(timezone.utc))
        try:
            with self._get_session() as session:
                result = session.execute(
                    delete(FileModel).where(
                        FileModel.expires_at.isnot(None),
                        FileModel.expires_at <= now,
                    )
                )
                session.commit()
                return result.rowcount
        except SQLAlchemyError as e:
            raise StorageError("Could not delete expired records") from e

    def list_all(self) -> list[FileRecord]:
        try:
            with self._get_session() as session:
                models = session.scalars(
                    select(FileModel).order_by(
                        FileModel.created_at.desc(), FileModel.id.desc()
                    )
                ).all()
                return [_model_to_record(m) for m in models]
        except SQLAlchemyError as e:
            raise StorageError("Could not list file records") from e

    def filenames(self) -> set[str]:
        """Names of every live record; these double as blob keys."""
        with self._get_session() as session:
            return set(session.scalars(select(FileModel.filename)).all())

    def get_total_storage(self) -> int:
        with self._get_session() as session:
            total = session.scalar(select(func.sum(FileModel.size)))
            return total or 0
