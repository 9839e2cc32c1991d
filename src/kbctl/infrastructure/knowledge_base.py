"""KnowledgeBase — the single dependency injected into every service.

Owns the filesystem view of the content directory, the metadata schema
resolved from settings, and (lazily) the SQLite snapshot engine. It holds
no corpus state of its own: services rebuild the corpus from the files on
every run, so the KnowledgeBase never goes stale.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from kbctl.infrastructure.database.engine import db_path_for, init_database
from kbctl.infrastructure.filesystem import (
    SourceFile,
    read_sources,
    resolve_document_path,
    write_document_file,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from kbctl.config.settings import KbSettings
    from kbctl.domain.schema import Schema

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """Repository over one knowledge-base directory.

    Constructed lazily by the CLI context from :class:`KbSettings`.
    """

    def __init__(self, settings: KbSettings) -> None:
        self._settings = settings
        self._schema: Schema = settings.metadata.to_schema()
        self._engine: Engine | None = None

    @property
    def root(self) -> Path:
        """The knowledge-base root directory (holds ``kbctl.toml`` and ``.kbctl/``)."""
        return self._settings.root

    @property
    def content_root(self) -> Path:
        """Directory scanned for documents."""
        return self._settings.content_root

    @property
    def settings(self) -> KbSettings:
        return self._settings

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def fence_tag(self) -> str:
        return self._settings.query.fence_tag

    @property
    def max_workers(self) -> int:
        return self._settings.build.max_workers

    @property
    def db_path(self) -> Path:
        return db_path_for(self.root, self._settings.database.filename)

    @property
    def engine(self) -> Engine:
        """SQLAlchemy engine for the snapshot database, created on first use."""
        if self._engine is None:
            self._engine = init_database(self.root, self._settings.database.filename)
        return self._engine

    def sources(self) -> list[SourceFile]:
        """Raw text of every document under the content root."""
        corpus = self._settings.corpus
        skip = set(corpus.skip_dirs)
        sources = read_sources(self.content_root, extensions=corpus.extensions, skip_dirs=skip)
        logger.debug("Read %d source files from %s", len(sources), self.content_root)
        return sources

    def document_path(self, relative: str) -> Path:
        """Absolute file path of corpus path *relative*."""
        return resolve_document_path(self.content_root, relative)

    def relative_path(self, path: str | Path) -> str:
        """Normalize a user-supplied path to a corpus path.

        Accepts a corpus-relative path or a filesystem path under the
        content root.
        """
        candidate = Path(path)
        if candidate.is_absolute() or candidate.exists():
            resolved = candidate.resolve()
            if resolved.is_relative_to(self.content_root):
                return resolved.relative_to(self.content_root).as_posix()
        return Path(path).as_posix().removeprefix("./")

    def read_document(self, relative: str) -> str:
        return self.document_path(relative).read_text(encoding="utf-8")

    def write_document(self, relative: str, content: str) -> None:
        write_document_file(self.document_path(relative), content)

    def close(self) -> None:
        """Dispose of the snapshot engine, if one was opened."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
