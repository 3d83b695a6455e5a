"""Jinja2 templates and filters for the HTML pages."""

from datetime import datetime, timezone
from pathlib import Path

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=TEMPLATES_DIR)


def _timeago(dt: datetime) -> str:
    now = datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    seconds = (now - dt).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        m = int(seconds // 60)
        return f"{m}m ago"
    if seconds < 86400:
        h = int(seconds // 3600)
        return f"{h}h ago"
    if seconds < 604800:
        d = int(seconds // 86400)
        return f"{d}d ago"
    return dt.strftime("%Y-%m-%d")


def _filesize(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024**2:
        return f"{size / 1024:.1f} KB"
    if size < 1024**3:
        return f"{size / 1024**2:.1f} MB"
    return f"{size / 1024**3:.1f} GB"


def _datetime(dt: datetime | None) -> str:
    if dt is None:
        return "Never"
    return dt.strftime("%Y-%m-%d %H:%M UTC")


templates.env.filters["timeago"] = _timeago
templates.env.filters["filesize"] = _filesize
templates.env.filters["datetime"] = _datetime
