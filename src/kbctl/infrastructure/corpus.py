"""Corpus: the in-memory store owned by the index builder.

Mutations are copy-on-write under a lock: ``upsert`` and ``remove`` build
new maps and swap them in as one step, and documents themselves are
immutable. A reader holding a :class:`CorpusSnapshot` therefore sees
either the whole old document (metadata and links together) or the whole
new one, never a mix.

Link resolution is not done here. It needs every identifier, so it runs
as a separate pass over a snapshot (see :mod:`kbctl.infrastructure.graph.engine`).
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from kbctl.domain.document import Document
from kbctl.domain.errors import DuplicateIdentifierError, DuplicateIndexError
from kbctl.domain.schema import covers


@dataclass(frozen=True)
class CorpusSnapshot:
    """Read-only view of the corpus at one version."""

    documents: Mapping[str, Document]
    categories: Mapping[str, frozenset[str]]
    version: int

    def all(self) -> list[Document]:
        return [self.documents[p] for p in sorted(self.documents)]

    def get(self, path: str) -> Document | None:
        return self.documents.get(path)

    def by_category(self, prefix: str) -> list[Document]:
        paths: set[str] = set()
        for category, members in self.categories.items():
            if covers(prefix, category):
                paths |= members
        return [self.documents[p] for p in sorted(paths)]

    def __len__(self) -> int:
        return len(self.documents)


class Corpus:
    """Aggregate store of accepted documents.

    Maintains three indexes alongside the documents: category prefix to
    paths (for ``by_category``), identifier to path (identifiers are unique
    corpus-wide) and category to its index document.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._documents: dict[str, Document] = {}
        self._categories: dict[str, frozenset[str]] = {}
        self._names: dict[str, str] = {}
        self._index_docs: dict[str, str] = {}
        self._version = 0

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def upsert(self, document: Document) -> Document | None:
        """Insert *document*, replacing any document at the same path.

        Returns the replaced document, if any.

        Raises:
            DuplicateIdentifierError: A different path owns the same name.
            DuplicateIndexError: The category already has another index.
        """
        with self._lock:
            owner = self._names.get(document.name)
            if owner is not None and owner != document.path:
                raise DuplicateIdentifierError(document.name, document.path, owner)

            category = document.category
            if document.is_index:
                current_index = self._index_docs.get(category)
                if current_index is not None and current_index != document.path:
                    raise DuplicateIndexError(category, document.path, current_index)

            previous = self._documents.get(document.path)

            documents = dict(self._documents)
            documents[document.path] = document
            names = dict(self._names)
            names[document.name] = document.path
            index_docs = dict(self._index_docs)
            if document.is_index:
                index_docs[category] = document.path
            elif index_docs.get(category) == document.path:
                del index_docs[category]
            categories = dict(self._categories)
            categories[category] = categories.get(category, frozenset()) | {document.path}

            self._swap(documents, categories, names, index_docs)
            return previous

    def remove(self, path: str) -> bool:
        """Remove the document at *path*. Returns False if absent."""
        with self._lock:
            document = self._documents.get(path)
            if document is None:
                return False

            documents = dict(self._documents)
            del documents[path]
            names = {k: v for k, v in self._names.items() if v != path}
            index_docs = {k: v for k, v in self._index_docs.items() if v != path}
            categories = dict(self._categories)
            remaining = categories.get(document.category, frozenset()) - {path}
            if remaining:
                categories[document.category] = remaining
            else:
                categories.pop(document.category, None)

            self._swap(documents, categories, names, index_docs)
            return True

    def _swap(
        self,
        documents: dict[str, Document],
        categories: dict[str, frozenset[str]],
        names: dict[str, str],
        index_docs: dict[str, str],
    ) -> None:
        self._documents = documents
        self._categories = categories
        self._names = names
        self._index_docs = index_docs
        self._version += 1

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> CorpusSnapshot:
        with self._lock:
            return CorpusSnapshot(
                documents=MappingProxyType(self._documents),
                categories=MappingProxyType(self._categories),
                version=self._version,
            )

    def all(self) -> list[Document]:
        return self.snapshot().all()

    def by_category(self, prefix: str) -> list[Document]:
        return self.snapshot().by_category(prefix)

    def get(self, path: str) -> Document | None:
        return self.snapshot().get(path)

    def resolve_name(self, name: str) -> Document | None:
        """Look up a document by identifier (file stem)."""
        with self._lock:
            path = self._names.get(name)
            return self._documents.get(path) if path is not None else None

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, path: object) -> bool:
        return path in self._documents
