"""SnapshotService — persist the corpus to SQLite and read it back.

The snapshot is a derived artifact for external tools: saving rebuilds it
from the files, and nothing in kbctl reads it in place of the files.
"""

from __future__ import annotations

from kbctl.infrastructure.repositories.corpus import CorpusRepository
from kbctl.services._helpers import now_iso
from kbctl.services.base import BaseService
from kbctl.services.ingest import IngestService
from kbctl.services.result import ServiceResult, failure
from kbctl.services.telemetry import trace_span, traced


class SnapshotService(BaseService):
    """Save and load corpus snapshots."""

    @traced
    def save(self) -> ServiceResult:
        outcome = IngestService(self._kb).build()
        with trace_span("persist"):
            counts = CorpusRepository(self._kb.engine).save(
                outcome.snapshot, outcome.graph, saved_at=now_iso()
            )
        return ServiceResult(
            ok=True,
            op="save",
            data={
                "database": str(self._kb.db_path),
                **counts,
                "rejected": len(outcome.rejected),
            },
        )

    @traced
    def show(self) -> ServiceResult:
        """Load the stored snapshot and summarize it."""
        op = "show"
        if not self._kb.db_path.is_file():
            return failure(op, "NO_SNAPSHOT", "No snapshot saved; run 'kbctl index save'")

        repo = CorpusRepository(self._kb.engine)
        info = repo.info()
        if "saved_at" not in info:
            return failure(op, "NO_SNAPSHOT", "Snapshot database is empty")

        corpus, links = repo.load()
        documents = [doc.summary() for doc in corpus.all()]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "database": str(self._kb.db_path),
                "saved_at": info["saved_at"],
                "documents": documents,
                "counts": {
                    "documents": len(documents),
                    "links": len(links),
                    "dangling": sum(1 for link in links if not link.resolved),
                },
            },
        )
