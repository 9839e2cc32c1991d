"""Metadata validator: all-or-nothing acceptance of parsed documents.

Every field rule is evaluated and every problem is collected, so a
rejected document reports all its issues at once. Accepted documents come
back with normalized metadata: dates as ISO strings, list fields as lists
of strings, untyped values made JSON-safe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from kbctl.domain.dates import to_date
from kbctl.domain.document import Document
from kbctl.domain.errors import ValidationIssue
from kbctl.domain.schema import DATE_CREATED, DATE_UPDATED, FieldSpec, Schema, covers
from kbctl.domain.types import FieldType, IssueKind


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one document.

    ``document`` holds the normalized document only when ``valid``.
    """

    valid: bool
    document: Document | None = None
    issues: list[ValidationIssue] = field(default_factory=list)


def json_safe(value: Any) -> Any:
    """Recursively convert dates to ISO strings."""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [json_safe(v) for v in value]
    return value


def _check_field(
    spec: FieldSpec,
    value: Any,
    issues: list[ValidationIssue],
) -> Any:
    """Validate one present value; return its normalized form."""
    name = spec.name
    if spec.type is FieldType.STRING:
        if not isinstance(value, str):
            issues.append(
                ValidationIssue(
                    kind=IssueKind.WRONG_TYPE,
                    field=name,
                    message=f"{name} must be a string, got {type(value).__name__}",
                )
            )
        elif spec.required and not value.strip():
            issues.append(
                ValidationIssue(
                    kind=IssueKind.MISSING_FIELD,
                    field=name,
                    message=f"{name} must not be empty",
                )
            )
        return value

    if spec.type is FieldType.LIST:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            issues.append(
                ValidationIssue(
                    kind=IssueKind.WRONG_TYPE,
                    field=name,
                    message=f"{name} must be a list of strings",
                )
            )
            return value
        return list(value)

    if spec.type is FieldType.DATE:
        parsed = to_date(value)
        if parsed is None:
            issues.append(
                ValidationIssue(
                    kind=IssueKind.INVALID_DATE,
                    field=name,
                    message=f"{name} is not a valid date: {value!r}",
                )
            )
            return value
        return parsed.isoformat()

    # FieldType.ENUM
    if not isinstance(value, str):
        issues.append(
            ValidationIssue(
                kind=IssueKind.WRONG_TYPE,
                field=name,
                message=f"{name} must be a string, got {type(value).__name__}",
            )
        )
    elif spec.choices and value not in spec.choices:
        issues.append(
            ValidationIssue(
                kind=IssueKind.INVALID_VALUE,
                field=name,
                message=f"{name} must be one of {list(spec.choices)}, got {value!r}",
            )
        )
    return value


def validate_document(document: Document, schema: Schema | None = None) -> ValidationResult:
    """Validate *document* against the field table of its category."""
    schema = schema or Schema()
    issues: list[ValidationIssue] = []
    metadata = json_safe(dict(document.metadata))

    for spec in schema.fields_for(document.category).values():
        value = document.metadata.get(spec.name)
        if value is None:
            if spec.required:
                issues.append(
                    ValidationIssue(
                        kind=IssueKind.MISSING_FIELD,
                        field=spec.name,
                        message=f"Missing required field: {spec.name}",
                    )
                )
            continue
        metadata[spec.name] = _check_field(spec, value, issues)

    created = to_date(document.metadata.get(DATE_CREATED))
    updated = to_date(document.metadata.get(DATE_UPDATED))
    if created is not None and updated is not None and updated < created:
        issues.append(
            ValidationIssue(
                kind=IssueKind.INVALID_DATE,
                field=DATE_UPDATED,
                message=f"{DATE_UPDATED} {updated} is earlier than {DATE_CREATED} {created}",
            )
        )

    if document.is_index:
        if schema.index_marker not in document.tags:
            issues.append(
                ValidationIssue(
                    kind=IssueKind.INVALID_VALUE,
                    field="tags",
                    message=f"Index documents must be tagged {schema.index_marker!r}",
                )
            )
        for directive in document.directives:
            if directive.is_valid and not covers(directive.scope, document.category):
                issues.append(
                    ValidationIssue(
                        kind=IssueKind.SCOPE,
                        field=None,
                        message=(
                            f"Directive at line {directive.line} is scoped to "
                            f"{directive.scope!r}, which does not cover category "
                            f"{document.category or '(root)'!r}"
                        ),
                    )
                )

    if issues:
        return ValidationResult(valid=False, issues=issues)
    return ValidationResult(valid=True, document=document.model_copy(update={"metadata": metadata}))
