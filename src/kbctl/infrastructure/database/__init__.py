"""SQLite snapshot engine and schema via SQLAlchemy Core."""

from kbctl.infrastructure.database.engine import create_db_engine, db_path_for, init_database
from kbctl.infrastructure.database.schema import documents, links, metadata, snapshot_info

__all__ = [
    "create_db_engine",
    "db_path_for",
    "documents",
    "init_database",
    "links",
    "metadata",
    "snapshot_info",
]
