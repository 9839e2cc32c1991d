"""GraphService: outgoing links, backlinks, dangling links and orphans."""

from __future__ import annotations

from kbctl.domain.document import Document
from kbctl.domain.links import Link
from kbctl.infrastructure.corpus import Corpus
from kbctl.services.base import BaseService
from kbctl.services.ingest import BuildOutcome, IngestService
from kbctl.services.result import ServiceResult, failure
from kbctl.services.telemetry import traced


def _link_dict(link: Link) -> dict[str, object]:
    return {
        "source_path": link.source_path,
        "target_name": link.target_name,
        "target_path": link.target_path,
        "resolved": link.resolved,
        "line": link.line,
    }


def _find(corpus: Corpus, ref: str) -> Document | None:
    """Locate a document by path, by path without ``.md``, or by name."""
    return corpus.get(ref) or corpus.get(f"{ref}.md") or corpus.resolve_name(ref)


class GraphService(BaseService):
    """Read-only views over the resolved link graph."""

    def _build_and_find(
        self, op: str, ref: str
    ) -> tuple[BuildOutcome, Document] | ServiceResult:
        outcome = IngestService(self._kb).build()
        doc = _find(outcome.corpus, self._kb.relative_path(ref)) or _find(outcome.corpus, ref)
        if doc is None:
            return failure(op, "NOT_FOUND", f"No document matches {ref!r}", ref=ref)
        return outcome, doc

    @traced
    def links(self, ref: str) -> ServiceResult:
        """Links written in a document, resolved or dangling, in source order."""
        found = self._build_and_find("links", ref)
        if isinstance(found, ServiceResult):
            return found
        outcome, doc = found
        items = [_link_dict(link) for link in outcome.graph.links_out(doc.path)]
        return ServiceResult(
            ok=True,
            op="links",
            data={"path": doc.path, "items": items, "count": len(items)},
        )

    @traced
    def backlinks(self, ref: str) -> ServiceResult:
        """Documents whose resolved links point at *ref*."""
        found = self._build_and_find("backlinks", ref)
        if isinstance(found, ServiceResult):
            return found
        outcome, doc = found
        items = [_link_dict(link) for link in outcome.graph.links_in(doc.path)]
        return ServiceResult(
            ok=True,
            op="backlinks",
            data={"path": doc.path, "items": items, "count": len(items)},
        )

    @traced
    def dangling(self) -> ServiceResult:
        outcome = IngestService(self._kb).build()
        items = [w.model_dump(mode="json") for w in outcome.graph.dangling]
        return ServiceResult(ok=True, op="dangling", data={"items": items, "count": len(items)})

    @traced
    def orphans(self) -> ServiceResult:
        """Accepted documents with no resolved links in or out."""
        outcome = IngestService(self._kb).build()
        snapshot = outcome.snapshot
        items = []
        for path in outcome.graph.orphans():
            doc = snapshot.get(path)
            if doc is not None:
                items.append(doc.summary())
        return ServiceResult(ok=True, op="orphans", data={"items": items, "count": len(items)})
