"""UpdateService — edit a document's metadata and write it back.

The edited document is re-parsed and re-validated before anything is
written; a change that would make the document invalid leaves the file
untouched. ``date-updated`` is refreshed to today on every write unless
the caller sets it explicitly, and never falls before ``date-created``.
"""

from __future__ import annotations

from typing import Any

import structlog

from kbctl.domain.dates import to_date
from kbctl.domain.errors import ParseError, RejectedDocument
from kbctl.domain.frontmatter import parse_frontmatter, render_frontmatter
from kbctl.domain.schema import DATE_CREATED, DATE_UPDATED
from kbctl.domain.types import FieldType
from kbctl.services._helpers import today_iso
from kbctl.services.base import BaseService
from kbctl.services.ingest import process_source
from kbctl.services.result import ServiceResult, failure
from kbctl.services.telemetry import traced

log = structlog.get_logger(__name__)


class UpdateService(BaseService):
    """Metadata edits on a single document."""

    def _coerce(self, key: str, raw: str) -> Any:
        """Turn a CLI string into the value type the schema declares for *key*."""
        ftype = self._kb.schema.field_type(key)
        if ftype is FieldType.LIST:
            return [part.strip() for part in raw.split(",") if part.strip()]
        if ftype is FieldType.DATE:
            parsed = to_date(raw)
            return parsed if parsed is not None else raw
        return raw

    @traced
    def update(
        self,
        path: str,
        *,
        changes: dict[str, str] | None = None,
        unset: list[str] | None = None,
    ) -> ServiceResult:
        op = "update"
        changes = changes or {}
        unset = unset or []
        rel = self._kb.relative_path(path)
        try:
            file_path = self._kb.document_path(rel)
        except ValueError as exc:
            return failure(op, "INVALID_PATH", str(exc), path=rel)
        if not file_path.is_file():
            return failure(op, "NOT_FOUND", f"No document at {rel}", path=rel)

        try:
            metadata, body, _ = parse_frontmatter(self._kb.read_document(rel))
        except ParseError as exc:
            return failure(op, "PARSE_ERROR", exc.message, path=rel)

        for key, raw in changes.items():
            metadata[key] = self._coerce(key, raw)
        for key in unset:
            metadata.pop(key, None)

        if DATE_UPDATED not in changes:
            today = to_date(today_iso())
            created = to_date(metadata.get(DATE_CREATED))
            if created is not None and today is not None and created > today:
                today = created
            metadata[DATE_UPDATED] = today

        rendered = render_frontmatter(metadata, body)
        checked = process_source(
            rel, rendered, schema=self._kb.schema, fence_tag=self._kb.fence_tag
        )
        if isinstance(checked, RejectedDocument):
            log.debug("update.rejected", path=rel, issues=len(checked.issues))
            return failure(
                op,
                "VALIDATION_FAILED",
                f"Update would make {rel} invalid",
                path=rel,
                issues=[i.model_dump(mode="json") for i in checked.issues],
                reason=checked.message,
            )

        self._kb.write_document(rel, rendered)
        log.debug("update.written", path=rel, fields=sorted([*changes, *unset]))
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": rel,
                "fields": sorted({*changes, *unset, DATE_UPDATED}),
                "metadata": checked.metadata,
            },
        )
