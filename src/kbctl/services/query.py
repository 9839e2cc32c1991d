"""QueryService — directive evaluation and metadata listing.

Every call rebuilds the corpus first, so results always reflect the files
as they are now.
"""

from __future__ import annotations

from typing import Any

import structlog

from kbctl.domain.directives import OP_EQ, Predicate, QueryDirective, SortOrder, parse_directive
from kbctl.domain.query import QueryResult, evaluate
from kbctl.domain.schema import TITLE, normalize_prefix
from kbctl.services.base import BaseService
from kbctl.services.ingest import IngestService
from kbctl.services.result import ServiceResult, failure
from kbctl.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)


class QueryService(BaseService):
    """Evaluates query directives against a fresh corpus snapshot."""

    @traced
    def run_document(self, path: str) -> ServiceResult:
        """Evaluate every directive embedded in the document at *path*."""
        op = "run_document"
        rel = self._kb.relative_path(path)
        outcome = IngestService(self._kb).build()
        snapshot = outcome.snapshot
        doc = snapshot.get(rel)
        if doc is None:
            rejected = outcome.rejection_for(rel)
            if rejected is not None:
                return failure(
                    op,
                    "REJECTED",
                    f"Document was rejected: {rejected.message}",
                    path=rel,
                    stage=rejected.stage,
                    issues=[i.model_dump(mode="json") for i in rejected.issues],
                )
            return failure(op, "NOT_FOUND", f"No document at {rel}", path=rel)

        documents = snapshot.all()
        with trace_span("evaluate") as span:
            results = [
                evaluate(d, documents, self._kb.schema, source_path=doc.path)
                for d in doc.directives
            ]
            if span:
                span.annotate("directives", len(results))

        warnings = []
        for result in results:
            if result.error is not None:
                log.debug("directive.error", path=doc.path, line=result.directive.line)
                warnings.append(f"{doc.path}:{result.directive.line}: {result.error.message}")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": doc.path,
                "title": doc.title,
                "results": [r.to_dict() for r in results],
                "count": len(results),
            },
            warnings=warnings,
        )

    @traced
    def evaluate_text(self, text: str) -> ServiceResult:
        """Evaluate one ad-hoc directive."""
        op = "evaluate"
        directive = parse_directive(text)
        if not directive.is_valid:
            return failure(op, "INVALID_DIRECTIVE", directive.error or "Malformed directive")
        outcome = IngestService(self._kb).build()
        result = evaluate(directive, outcome.snapshot.all(), self._kb.schema)
        return self._result_or_error(op, result)

    @traced
    def list_documents(
        self,
        *,
        scope: str | None = None,
        where: list[tuple[str, str]] | None = None,
        sort: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        fields: list[str] | None = None,
    ) -> ServiceResult:
        """Filter documents with CLI options instead of directive text."""
        op = "list"
        directive = QueryDirective(
            scope=normalize_prefix(scope or ""),
            predicates=tuple(Predicate(field=k, value=v, op=OP_EQ) for k, v in where or []),
            projection=tuple(fields) if fields else (TITLE,),
            order=SortOrder(field=sort, descending=descending) if sort else None,
            limit=limit,
        )
        outcome = IngestService(self._kb).build()
        result = evaluate(directive, outcome.snapshot.all(), self._kb.schema)
        return self._result_or_error(op, result)

    @staticmethod
    def _result_or_error(op: str, result: QueryResult) -> ServiceResult:
        if result.error is not None:
            return failure(
                op,
                "DIRECTIVE_ERROR",
                result.error.message,
                kind=str(result.error.kind),
            )
        data: dict[str, Any] = {
            "rows": result.rows,
            "count": len(result.rows),
            "total": result.total,
            "fields": list(dict.fromkeys(["path", *result.directive.projection])),
        }
        return ServiceResult(ok=True, op=op, data=data)
