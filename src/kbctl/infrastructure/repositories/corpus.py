"""Repository for saving and loading corpus snapshots."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, select

from kbctl.domain.document import Document
from kbctl.domain.links import Link
from kbctl.infrastructure.corpus import Corpus
from kbctl.infrastructure.database.schema import documents, links, snapshot_info

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from kbctl.infrastructure.corpus import CorpusSnapshot
    from kbctl.infrastructure.graph.engine import LinkGraph


class CorpusRepository:
    """Encapsulates SQL for the persisted snapshot."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save(self, snapshot: CorpusSnapshot, graph: LinkGraph, *, saved_at: str) -> dict[str, int]:
        """Replace the stored snapshot with *snapshot* and its link graph."""
        doc_rows = [_document_row(doc) for doc in snapshot.all()]
        link_rows = [
            {
                "source_path": link.source_path,
                "target_name": link.target_name,
                "target_path": link.target_path,
                "resolved": 1 if link.resolved else 0,
                "line": link.line,
            }
            for link in graph.links
        ]

        with self._engine.begin() as conn:
            conn.execute(delete(links))
            conn.execute(delete(documents))
            conn.execute(delete(snapshot_info))
            if doc_rows:
                conn.execute(insert(documents), doc_rows)
            if link_rows:
                conn.execute(insert(links), link_rows)
            conn.execute(
                insert(snapshot_info),
                [
                    {"key": "saved_at", "value": saved_at},
                    {"key": "version", "value": str(snapshot.version)},
                ],
            )
        return {"documents": len(doc_rows), "links": len(link_rows)}

    def load(self) -> tuple[Corpus, list[Link]]:
        """Rebuild a :class:`Corpus` and its link list from the stored snapshot."""
        corpus = Corpus()
        with self._engine.connect() as conn:
            for row in conn.execute(select(documents).order_by(documents.c.path)).mappings():
                corpus.upsert(
                    Document.model_validate(
                        {
                            "path": row["path"],
                            "kind": row["kind"],
                            "metadata": json.loads(row["metadata"]),
                            "body": row["body"],
                            "links_out": json.loads(row["links_out"]),
                            "directives": json.loads(row["directives"]),
                        }
                    )
                )
            stored_links = [
                Link(
                    source_path=row.source_path,
                    target_name=row.target_name,
                    resolved=bool(row.resolved),
                    target_path=row.target_path,
                    line=row.line,
                )
                for row in conn.execute(select(links).order_by(links.c.id))
            ]
        return corpus, stored_links

    def info(self) -> dict[str, Any]:
        """Counts and save metadata of the stored snapshot."""
        with self._engine.connect() as conn:
            doc_count = conn.execute(select(func.count()).select_from(documents)).scalar_one()
            link_count = conn.execute(select(func.count()).select_from(links)).scalar_one()
            dangling = conn.execute(
                select(func.count()).select_from(links).where(links.c.resolved == 0)
            ).scalar_one()
            info_rows = conn.execute(select(snapshot_info)).fetchall()
        result: dict[str, Any] = {row.key: row.value for row in info_rows}
        result.update(documents=int(doc_count), links=int(link_count), dangling=int(dangling))
        return result


def _document_row(doc: Document) -> dict[str, Any]:
    return {
        "path": doc.path,
        "name": doc.name,
        "category": doc.category,
        "kind": str(doc.kind),
        "title": doc.title,
        "metadata": json.dumps(doc.metadata, sort_keys=True),
        "body": doc.body,
        "links_out": json.dumps([asdict(ref) for ref in doc.links_out]),
        "directives": json.dumps([d.model_dump(mode="json") for d in doc.directives]),
    }
