"""Query engine: evaluates a :class:`QueryDirective` over documents.

Evaluation order is fixed: scope filter, AND-ed predicates, sort, limit,
projection. The function is pure; callers pass a fresh corpus snapshot on
every evaluation so results are never stale.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from kbctl.domain.dates import to_date
from kbctl.domain.directives import OP_CONTAINS, Predicate, QueryDirective
from kbctl.domain.document import Document
from kbctl.domain.errors import DirectiveError
from kbctl.domain.schema import PSEUDO_FIELDS, Schema, covers
from kbctl.domain.types import DirectiveErrorKind, FieldType


@dataclass(frozen=True)
class QueryResult:
    """Rows produced by one directive, or the error that prevented them.

    ``total`` counts matching documents before ``LIMIT`` was applied.
    """

    directive: QueryDirective
    rows: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    error: DirectiveError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "line": self.directive.line,
            "source": self.directive.source,
            "count": len(self.rows),
            "total": self.total,
            "rows": self.rows,
            "error": self.error.model_dump(mode="json") if self.error else None,
        }


class _EvaluationError(Exception):
    def __init__(self, kind: DirectiveErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _matches(doc: Document, pred: Predicate, ftype: FieldType | None, literal: Any) -> bool:
    value = doc.field_value(pred.field)
    if value is None:
        return False
    if isinstance(value, list):
        return literal in [_scalar_text(v) for v in value]
    if ftype is FieldType.DATE:
        return to_date(value) == literal
    text = _scalar_text(value)
    if pred.op == OP_CONTAINS:
        return literal in text
    return text == literal


def _sort_key(value: Any, ftype: FieldType | None) -> Any:
    if ftype is FieldType.DATE:
        return to_date(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return _scalar_text(value)


def _sort(docs: list[Document], directive: QueryDirective, schema: Schema) -> list[Document]:
    by_path = sorted(docs, key=lambda d: d.path)
    order = directive.order
    if order is None:
        return by_path

    ftype = schema.field_type(order.field)
    if ftype is FieldType.LIST or any(
        isinstance(d.field_value(order.field), list) for d in by_path
    ):
        msg = f"Cannot sort by list-valued field {order.field!r}"
        raise _EvaluationError(DirectiveErrorKind.UNSORTABLE, msg)

    keyed: list[tuple[Any, Document]] = []
    missing: list[Document] = []
    for doc in by_path:
        value = doc.field_value(order.field)
        key = None if value is None else _sort_key(value, ftype)
        if key is None:
            missing.append(doc)
        else:
            keyed.append((key, doc))

    # Numbers and strings cannot be compared; fall back to text when mixed.
    if len({isinstance(k, str) for k, _ in keyed}) > 1:
        keyed = [(_scalar_text(k), d) for k, d in keyed]

    # Stable sort keeps the path order for ties in both directions.
    keyed.sort(key=lambda pair: pair[0], reverse=order.descending)
    return [doc for _, doc in keyed] + missing


def _project(doc: Document, projection: tuple[str, ...]) -> dict[str, Any]:
    row: dict[str, Any] = {"path": doc.path}
    for name in projection:
        row[name] = doc.field_value(name)
    return row


def known_fields(documents: Iterable[Document], schema: Schema) -> set[str]:
    """Field names a directive may filter or sort on."""
    names = schema.known_fields() | set(PSEUDO_FIELDS)
    for doc in documents:
        names.update(doc.metadata)
    return names


def _prepare_literals(
    directive: QueryDirective,
    schema: Schema,
    known: set[str],
) -> list[tuple[Predicate, FieldType | None, Any]]:
    prepared: list[tuple[Predicate, FieldType | None, Any]] = []
    for pred in directive.predicates:
        if pred.field not in known:
            msg = f"Unknown field in WHERE: {pred.field!r}"
            raise _EvaluationError(DirectiveErrorKind.UNKNOWN_FIELD, msg)
        ftype = schema.field_type(pred.field)
        literal: Any = pred.value
        if ftype is FieldType.DATE:
            literal = to_date(pred.value)
            if literal is None:
                msg = f"{pred.field} expects a date literal, got {pred.value!r}"
                raise _EvaluationError(DirectiveErrorKind.INVALID_LITERAL, msg)
        prepared.append((pred, ftype, literal))
    if directive.order is not None and directive.order.field not in known:
        msg = f"Unknown field in SORT: {directive.order.field!r}"
        raise _EvaluationError(DirectiveErrorKind.UNKNOWN_FIELD, msg)
    return prepared


def evaluate(
    directive: QueryDirective,
    documents: Iterable[Document],
    schema: Schema | None = None,
    *,
    source_path: str | None = None,
) -> QueryResult:
    """Evaluate *directive* against *documents*.

    Errors are scoped to this directive and returned, never raised.
    """
    schema = schema or Schema()
    if directive.error is not None:
        return QueryResult(
            directive=directive,
            error=DirectiveError(
                kind=DirectiveErrorKind.MALFORMED,
                message=directive.error,
                source_path=source_path,
                line=directive.line or None,
            ),
        )

    docs = list(documents)
    try:
        prepared = _prepare_literals(directive, schema, known_fields(docs, schema))
        candidates = [d for d in docs if covers(directive.scope, d.category)]
        matched = [
            d
            for d in candidates
            if all(_matches(d, pred, ftype, lit) for pred, ftype, lit in prepared)
        ]
        ordered = _sort(matched, directive, schema)
    except _EvaluationError as exc:
        return QueryResult(
            directive=directive,
            error=DirectiveError(
                kind=exc.kind,
                message=exc.message,
                source_path=source_path,
                line=directive.line or None,
            ),
        )

    if directive.limit is not None:
        ordered = ordered[: directive.limit]
    return QueryResult(
        directive=directive,
        rows=[_project(d, directive.projection) for d in ordered],
        total=len(matched),
    )
