"""Application configuration."""

import logging
import os
import re
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

ROOT_DIR = Path(__file__).parent.parent


def parse_size(size_str: str) -> int:
    """Parse size string like '100MB', '1GB' into bytes."""
    if not size_str:
        return 0

    match = re.match(r"^(\d+(?:\.\d+)?)\s*(B|KB|MB|GB|TB)?$", size_str.strip().upper())
    if not match:
        raise ValueError(f"Invalid size: {size_str!r}")

    value = float(match.group(1))
    unit = match.group(2) or "B"

    multipliers = {
        "B": 1,
        "KB": 1024,
        "MB": 1024**2,
        "GB": 1024**3,
        "TB": 1024**4,
    }

    return int(value * multipliers[unit])


def parse_bool(value: str) -> bool:
    """Parse an on/off env value; 1, true, yes and on count as on."""
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    data_dir: Path = ROOT_DIR / "data"
    database_url: str | None = None
    host: str = "0.0.0.0"
    port: int = 3000
    public_base_url: str | None = None

    max_file_size: int = 100 * 1024**2
    bcrypt_rounds: int = 10

    cleanup_interval: float = 60.0
    cleanup_orphans: bool = True

    admin_user: str = ""
    admin_pass: str = ""

    log_level: str = "INFO"

    @property
    def files_dir(self) -> Path:
        return self.data_dir / "files"

    @property
    def db_url(self) -> str:
        return self.database_url or f"sqlite:///{self.data_dir / 'linkdrop.db'}"

    @property
    def admin_enabled(self) -> bool:
        return bool(self.admin_user and self.admin_pass)


def load_settings() -> Settings:
    """Build settings from the environment (and a .env file, if present)."""
    load_dotenv()
    env = os.environ
    return Settings(
        data_dir=Path(env.get("DATA_DIR", str(ROOT_DIR / "data"))),
        database_url=env.get("DATABASE_URL") or None,
        host=env.get("HOST", "0.0.0.0"),
        port=int(env.get("PORT", "3000")),
        public_base_url=env.get("PUBLIC_BASE_URL") or None,
        max_file_size=parse_size(env.get("MAX_FILE_SIZE", "100MB")),
        bcrypt_rounds=int(env.get("BCRYPT_ROUNDS", "10")),
        cleanup_interval=float(env.get("CLEANUP_INTERVAL", "60")),
        cleanup_orphans=parse_bool(env.get("CLEANUP_ORPHANS", "true")),
        admin_user=env.get("ADMIN_USER", "").strip(),
        admin_pass=env.get("ADMIN_PASS", "").strip(),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
