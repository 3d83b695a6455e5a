"""Errors raised by uploads and storage.

Access outcomes (not found, expired, wrong password) are not errors; see
``AccessDecision``.
"""


class LinkdropError(Exception):
    """Base class for all application errors."""


class SizeExceededError(LinkdropError):
    """The upload is larger than the configured limit."""

    def __init__(self, limit: int):
        super().__init__(f"File exceeds max size of {limit} bytes")
        self.limit = limit


class StorageError(LinkdropError):
    """Disk or database I/O failed."""


class DuplicateKeyError(StorageError):
    """A record with the same filename already exists."""
