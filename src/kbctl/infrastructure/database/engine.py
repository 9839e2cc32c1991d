"""Database engine setup for the SQLite corpus snapshot.

The DB lives at ``{root}/.kbctl/{filename}``. SQLAlchemy Core (not ORM)
is used: kbctl is a short-lived CLI process with no use for sessions or
identity maps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from kbctl.infrastructure.database.schema import metadata

STATE_DIR = ".kbctl"
DEFAULT_DB_FILENAME = "kbctl.db"


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with foreign keys enforced."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def db_path_for(root: Path, filename: str = DEFAULT_DB_FILENAME) -> Path:
    return root / STATE_DIR / filename


def init_database(root: Path, filename: str = DEFAULT_DB_FILENAME) -> Engine:
    """Create ``.kbctl/`` and all snapshot tables. Idempotent."""
    db_path = db_path_for(root, filename)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    return engine
