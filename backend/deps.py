"""Request dependencies — components built once in ``main.create_app``."""

from fastapi import Request

from api.files.repositories.files_repository import FilesRepository
from blob_store import BlobStore
from cleanup import Reaper
from config import Settings
from security import PasswordHasher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> FilesRepository:
    return request.app.state.repository


def get_blobs(request: Request) -> BlobStore:
    return request.app.state.blobs


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_reaper(request: Request) -> Reaper:
    return request.app.state.reaper
