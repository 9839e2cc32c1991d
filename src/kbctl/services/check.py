"""CheckService — the batch report over the whole knowledge base.

Reports four lists: accepted documents, rejected documents (every reason),
dangling links and directive errors. There is no pass/fail
verdict; ``ok`` is False only when the run itself could not happen.
"""

from __future__ import annotations

import structlog

from kbctl.domain.errors import DirectiveError
from kbctl.domain.query import evaluate
from kbctl.domain.schema import Schema
from kbctl.services.base import BaseService
from kbctl.services.ingest import BuildOutcome, IngestService
from kbctl.services.result import ServiceResult
from kbctl.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)


def collect_directive_errors(outcome: BuildOutcome, schema: Schema) -> list[DirectiveError]:
    """Evaluate every directive in the corpus and keep the failures."""
    snapshot = outcome.snapshot
    documents = snapshot.all()
    errors: list[DirectiveError] = []
    for doc in documents:
        for directive in doc.directives:
            result = evaluate(directive, documents, schema, source_path=doc.path)
            if result.error is not None:
                log.debug(
                    "directive.error",
                    path=doc.path,
                    line=directive.line,
                    kind=str(result.error.kind),
                    message=result.error.message,
                )
                errors.append(result.error)
    return errors


class CheckService(BaseService):
    """Validates the corpus and reports every problem found."""

    @traced
    def check(self) -> ServiceResult:
        outcome = IngestService(self._kb).build()
        with trace_span("directives"):
            directive_errors = collect_directive_errors(outcome, self._kb.schema)

        accepted = [doc.summary() for doc in outcome.snapshot.all()]
        rejected = [item.model_dump(mode="json") for item in outcome.rejected]
        dangling = [w.model_dump(mode="json") for w in outcome.graph.dangling]
        errors = [e.model_dump(mode="json") for e in directive_errors]

        return ServiceResult(
            ok=True,
            op="check",
            data={
                "accepted": accepted,
                "rejected": rejected,
                "dangling": dangling,
                "directive_errors": errors,
                "counts": {
                    "scanned": outcome.scanned,
                    "accepted": len(accepted),
                    "rejected": len(rejected),
                    "links": len(outcome.graph.links),
                    "dangling": len(dangling),
                    "directive_errors": len(errors),
                },
            },
        )
