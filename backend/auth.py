"""Admin authentication — headers and Basic Auth."""

import base64
import binascii
import secrets

from fastapi import HTTPException, Request, status

from config import Settings


def _basic_credentials(request: Request) -> tuple[str, str] | None:
    header = request.headers.get("Authorization", "")
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    user, sep, password = decoded.partition(":")
    return (user, password) if sep else None


def _matches(settings: Settings, user: str, password: str) -> bool:
    return (
        secrets.compare_digest(user.encode(), settings.admin_user.encode())
        and secrets.compare_digest(password.encode(), settings.admin_pass.encode())
    )


def is_admin(request: Request) -> bool:
    """Check admin via headers or Basic Auth."""
    settings: Settings = request.app.state.settings
    if not settings.admin_enabled:
        return True

    # Check header auth (API / curl)
    user = request.headers.get("X-Admin-User", "")
    password = request.headers.get("X-Admin-Pass", "")
    if user and password:
        return _matches(settings, user, password)

    # Browser
    credentials = _basic_credentials(request)
    if credentials:
        return _matches(settings, *credentials)

    return False


def require_admin(request: Request) -> None:
    """Dependency that rejects non-admin requests with a Basic challenge."""
    if not is_admin(request):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin access required",
            headers={"WWW-Authenticate": 'Basic realm="linkdrop"'},
        )
