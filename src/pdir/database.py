"""Database engine and session management."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


def _alembic_cfg(db_url: str) -> AlembicConfig:
    """Build an Alembic Config pointing at the bundled migrations."""
    # alembic.ini lives at the project root; find it relative to this file
    pkg_dir = Path(__file__).resolve().parent  # src/pdir
    project_root = pkg_dir.parent.parent  # repo root
    ini_path = project_root / "alembic.ini"
    cfg = AlembicConfig(str(ini_path))
    cfg.set_main_option("sqlalchemy.url", db_url)
    cfg.set_main_option("script_location", str(project_root / "alembic"))
    return cfg


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:  # noqa: ANN001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Handle on one SQLite database file.

    Construct it once per process (the CLI builds one per invocation) and
    pass it to whoever needs sessions. Call :meth:`dispose` when done.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.path = Path(db_path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.url = f"sqlite:///{self.path}"
        self.engine: Engine = create_engine(self.url, echo=False)
        event.listen(self.engine, "connect", _enable_foreign_keys)
        self._session_factory: sessionmaker[Session] = sessionmaker(bind=self.engine)

    def init(self) -> None:
        """Bring the schema up to date by running Alembic migrations to head.

        This is idempotent - safe to call multiple times.  Alembic's INFO
        logging is silenced so it doesn't pollute CLI output.
        """
        cfg = _alembic_cfg(self.url)
        alembic_logger = logging.getLogger("alembic")
        prev_level = alembic_logger.level
        alembic_logger.setLevel(logging.WARNING)
        try:
            alembic_command.upgrade(cfg, "head")
        finally:
            alembic_logger.setLevel(prev_level)
        logger.debug("Database at %s migrated to head", self.path)

    def session(self) -> Session:
        """Return a new session; the caller commits and closes it."""
        return self._session_factory()

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
