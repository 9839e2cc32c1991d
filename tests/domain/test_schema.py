"""Tests for category-aware field tables."""

from __future__ import annotations

from kbctl.domain.schema import Schema, covers, normalize_prefix
from kbctl.domain.types import DocumentKind, FieldType


class TestCovers:
    def test_empty_prefix_covers_everything(self) -> None:
        assert covers("", "anything/at/all")
        assert covers("", "")

    def test_exact_and_nested(self) -> None:
        assert covers("data-structures", "data-structures")
        assert covers("data-structures", "data-structures/trees")

    def test_sibling_with_shared_prefix_not_covered(self) -> None:
        assert not covers("data", "data-structures")

    def test_normalize_prefix(self) -> None:
        assert normalize_prefix("/algorithms/") == "algorithms"
        assert normalize_prefix("./notes") == "notes"
        assert normalize_prefix(".") == ""


class TestSchema:
    def test_builtin_required_fields(self) -> None:
        required = {n for n, spec in Schema().builtin_fields().items() if spec.required}
        assert required == {"title", "category", "tags", "date-created", "date-updated"}

    def test_extras_cannot_retype_builtins(self) -> None:
        schema = Schema(extra_fields={"title": FieldType.LIST})
        assert schema.fields_for("")["title"].type is FieldType.STRING

    def test_category_fields_apply_below_prefix(self) -> None:
        schema = Schema(category_fields={"algorithms": {"complexity": FieldType.STRING}})
        assert "complexity" in schema.fields_for("algorithms/graphs")
        assert "complexity" not in schema.fields_for("notes")

    def test_field_type_lookup(self) -> None:
        schema = Schema(extra_fields={"reviewed": FieldType.DATE})
        assert schema.field_type("date-created") is FieldType.DATE
        assert schema.field_type("reviewed") is FieldType.DATE
        assert schema.field_type("unknown") is None

    def test_detect_kind(self) -> None:
        schema = Schema()
        assert schema.detect_kind("overview", ["index"]) == DocumentKind.INDEX
        assert schema.detect_kind("index", []) == DocumentKind.INDEX
        assert schema.detect_kind("heap", ["trees"]) == DocumentKind.TOPIC
