"""Database configuration and session management."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "db_migrations"
ALEMBIC_INI = Path(__file__).parent / "alembic.ini"


class Base(DeclarativeBase):
    pass


class Database:
    """Engine and session factory for one database URL.

    Constructed once at startup and disposed on shutdown; repositories
    receive ``session_factory`` instead of reaching for a module global.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        connect_args = {}
        if make_url(url).get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False
            database = make_url(url).database
            if database and database != ":memory:":
                Path(database).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(url, connect_args=connect_args, echo=echo)
        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def init_db(self) -> None:
        # Import models so they register on Base.metadata
        import orm  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def run_migrations(self) -> None:
        """Run Alembic migrations, falling back to create_all."""
        try:
            alembic_cfg = Config(str(ALEMBIC_INI))
            alembic_cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
            alembic_cfg.set_main_option("sqlalchemy.url", self.url.replace("%", "%%"))
            command.upgrade(alembic_cfg, "head")
        except Exception as e:
            logger.warning("Migration failed, creating tables directly: %s", e)
            self.init_db()

    def dispose(self) -> None:
        self.engine.dispose()
