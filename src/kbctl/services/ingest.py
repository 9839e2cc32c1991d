"""IngestService — build a corpus and its link graph from the source files.

Pipeline:
  1. Read every source file through the KnowledgeBase.
  2. Parse and validate each one in a thread pool. Documents are
     independent at this stage, so a failure stays with its document.
  3. Barrier: wait for every worker before touching the corpus.
  4. Upsert accepted documents in path order. Identifier and
     index-document conflicts reject the later path.
  5. Resolve links over the finished snapshot.

Other services call :meth:`IngestService.build` and read from the
returned :class:`BuildOutcome`; it is not itself a CLI operation.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import structlog

from kbctl.domain.document import Document
from kbctl.domain.errors import (
    DuplicateIdentifierError,
    DuplicateIndexError,
    ParseError,
    RejectedDocument,
)
from kbctl.domain.parser import parse_document
from kbctl.domain.schema import Schema
from kbctl.domain.validation import validate_document
from kbctl.infrastructure.corpus import Corpus, CorpusSnapshot
from kbctl.infrastructure.filesystem import SourceFile
from kbctl.infrastructure.graph.engine import LinkGraph, LinkResolver
from kbctl.services.base import BaseService
from kbctl.services.telemetry import trace_span

log = structlog.get_logger(__name__)

STAGE_PARSE = "parse"
STAGE_VALIDATE = "validate"
STAGE_INDEX = "index"


@dataclass(frozen=True)
class BuildOutcome:
    """Everything one ingest run produced."""

    corpus: Corpus
    graph: LinkGraph
    rejected: list[RejectedDocument] = field(default_factory=list)
    scanned: int = 0

    @property
    def snapshot(self) -> CorpusSnapshot:
        return self.corpus.snapshot()

    def rejection_for(self, path: str) -> RejectedDocument | None:
        for rejected in self.rejected:
            if rejected.path == path:
                return rejected
        return None


def process_source(
    path: str,
    text: str,
    *,
    schema: Schema,
    fence_tag: str,
) -> Document | RejectedDocument:
    """Parse and validate one document. Never raises for document problems."""
    try:
        parsed = parse_document(path, text, schema=schema, fence_tag=fence_tag)
    except ParseError as exc:
        return RejectedDocument(path=path, stage=STAGE_PARSE, message=exc.message)

    result = validate_document(parsed, schema)
    if not result.valid or result.document is None:
        return RejectedDocument(
            path=path,
            stage=STAGE_VALIDATE,
            issues=list(result.issues),
            message=f"{len(result.issues)} metadata issue(s)",
        )
    return result.document


class IngestService(BaseService):
    """Turns the knowledge-base files into a corpus and link graph."""

    def build(self) -> BuildOutcome:
        sources = self._kb.sources()

        with trace_span("parse_validate") as span:
            processed = self._process_all(sources)
            if span:
                span.annotate("documents", len(sources))

        corpus = Corpus()
        rejected: list[RejectedDocument] = []
        with trace_span("index"):
            for item in processed:
                if isinstance(item, RejectedDocument):
                    rejected.append(item)
                    continue
                try:
                    corpus.upsert(item)
                except (DuplicateIdentifierError, DuplicateIndexError) as exc:
                    rejected.append(
                        RejectedDocument(path=item.path, stage=STAGE_INDEX, message=str(exc))
                    )

        with trace_span("resolve_links"):
            graph = LinkResolver().resolve(corpus.snapshot())

        for item in rejected:
            log.debug(
                "document.rejected",
                path=item.path,
                stage=item.stage,
                reason=item.message,
                issues=[issue.message for issue in item.issues],
            )
        for warning in graph.dangling:
            log.debug(
                "link.dangling",
                source=warning.source_path,
                target=warning.target_name,
                line=warning.line,
            )
        log.debug(
            "ingest.complete",
            scanned=len(sources),
            accepted=len(corpus),
            rejected=len(rejected),
            dangling=len(graph.dangling),
        )
        return BuildOutcome(corpus=corpus, graph=graph, rejected=rejected, scanned=len(sources))

    def _process_all(self, sources: list[SourceFile]) -> list[Document | RejectedDocument]:
        schema = self._kb.schema
        fence_tag = self._kb.fence_tag

        def work(source: SourceFile) -> Document | RejectedDocument:
            if source.text is None:
                return RejectedDocument(
                    path=source.path,
                    stage=STAGE_PARSE,
                    message=source.error or "Unreadable file",
                )
            return process_source(source.path, source.text, schema=schema, fence_tag=fence_tag)

        workers = self._kb.max_workers
        if workers <= 1 or len(sources) <= 1:
            return [work(source) for source in sources]
        # map() yields in input order, and list() is the barrier.
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="kbctl-ingest") as pool:
            return list(pool.map(work, sources))
