"""Blob store — uploaded bytes on local disk."""

import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from fastapi import UploadFile

from errors import SizeExceededError, StorageError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB
MAX_NAME_LENGTH = 100


@dataclass(frozen=True)
class StoredBlob:
    path: Path
    size: int


def _safe_name(name: str) -> str:
    name = Path(name.replace("\\", "/")).name
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name).strip("._")
    return name[-MAX_NAME_LENGTH:] or "file"


class BlobStore:
    def __init__(self, root: Path, max_size: int = 0):
        self.root = Path(root)
        self.max_size = max_size

    def _ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def new_key(self, original_name: str) -> str:
        """Collision-resistant storage key derived from the upload name."""
        return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{_safe_name(original_name)}"

    async def put(self, upload: UploadFile, key: str) -> StoredBlob:
        """Stream ``upload`` to ``root/key``, enforcing the size limit."""
        self._ensure_root()
        path = self.root / key
        size = 0
        try:
            with open(path, "xb") as out:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    if self.max_size and size > self.max_size:
                        raise SizeExceededError(self.max_size)
                    out.write(chunk)
        except SizeExceededError:
            path.unlink(missing_ok=True)
            raise
        except FileExistsError as e:
            raise StorageError(f"Blob already exists: {key}") from e
        except OSError as e:
            path.unlink(missing_ok=True)
            raise StorageError(f"Could not write blob: {key}") from e
        finally:
            await upload.close()

        return StoredBlob(path=path, size=size)

    def path_for(self, key: str) -> Path:
        """Where the blob for ``key`` lives under the current root."""
        return self.root / key

    def remove(self, path: str | Path) -> bool:
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return False
        except OSError:
            logger.exception("Could not remove blob %s", path)
            return False
        return True

    def exists(self, path: str | Path) -> bool:
        return Path(path).is_file()

    def iter_blobs(self) -> Iterator[Path]:
        if not self.root.exists():
            return
        for entry in self.root.iterdir():
            if entry.is_file():
                yield entry
