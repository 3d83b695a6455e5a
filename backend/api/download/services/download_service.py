"""Download service — decides whether a stored file may be served.

Each access attempt ends in exactly one ``AccessDecision``. Only a SERVE
outcome touches the store, and it bumps the download counter exactly once.
Expired records are reported but never deleted here; that is left to the
cleanup task.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from api.files.dto.file import FileRecord
from api.files.repositories.files_repository import FilesRepository
from blob_store import BlobStore
from security import PasswordHasher

logger = logging.getLogger(__name__)


class AccessDecision(str, enum.Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    CHALLENGE = "challenge"
    UNAUTHORIZED = "unauthorized"
    SERVE = "serve"


@dataclass(frozen=True)
class AccessResult:
    decision: AccessDecision
    record: FileRecord | None = None

    @property
    def allowed(self) -> bool:
        return self.decision is AccessDecision.SERVE


def _lookup(
    repository: FilesRepository, filename: str, now: datetime
) -> AccessResult | FileRecord:
    record = repository.find_by_filename(filename)
    if record is None:
        return AccessResult(AccessDecision.NOT_FOUND)
    if record.is_expired(now):
        return AccessResult(AccessDecision.EXPIRED)
    return record


def _serve(
    repository: FilesRepository, blobs: BlobStore, record: FileRecord
) -> AccessResult:
    if not blobs.exists(blobs.path_for(record.filename)):
        logger.warning("Blob missing for %s", record.filename)
        return AccessResult(AccessDecision.NOT_FOUND)

    # The record may have been reaped since the lookup
    if not repository.increment_downloads(record.filename):
        return AccessResult(AccessDecision.NOT_FOUND)

    record = record.model_copy(update={"download_count": record.download_count + 1})
    return AccessResult(AccessDecision.SERVE, record)


def check_access(
    repository: FilesRepository,
    blobs: BlobStore,
    filename: str,
    now: datetime | None = None,
) -> AccessResult:
    """Handle a plain GET of a shared link."""
    now = now or datetime.now(timezone.utc)
    found = _lookup(repository, filename, now)
    if isinstance(found, AccessResult):
        logger.debug("Access to %s: %s", filename, found.decision.value)
        return found

    if found.protected:
        return AccessResult(AccessDecision.CHALLENGE, found)

    return _serve(repository, blobs, found)


def verify(
    repository: FilesRepository,
    blobs: BlobStore,
    hasher: PasswordHasher,
    filename: str,
    password: str,
    now: datetime | None = None,
) -> AccessResult:
    """Handle a password submission for a protected file.

    The record is looked up again because it may have expired between the
    challenge and the submission. A wrong password changes nothing.
    """
    now = now or datetime.now(timezone.utc)
    found = _lookup(repository, filename, now)
    if isinstance(found, AccessResult):
        return found

    if found.password_hash is None or not hasher.verify(password, found.password_hash):
        logger.info("Wrong password for %s", filename)
        return AccessResult(AccessDecision.UNAUTHORIZED)

    return _serve(repository, blobs, found)
