"""Tests for QueryService."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias
from pathlib import Path

from kbctl.infrastructure.knowledge_base import KnowledgeBase
from kbctl.services.query import QueryService

DocFactory: TypeAlias = Callable[..., str]


class TestRunDocument:
    def test_index_directive(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).run_document("data-structures/index.md")
        assert result.ok
        assert result.data["title"] == "Data Structures"
        [query] = result.data["results"]
        assert query["line"] == 10
        assert query["error"] is None
        assert query["rows"] == [
            {
                "path": "data-structures/trees/avl-tree.md",
                "title": "AVL Tree",
                "date-updated": "2024-02-10",
            },
            {
                "path": "data-structures/hash-table.md",
                "title": "Hash Table",
                "date-updated": "2024-01-20",
            },
        ]

    def test_edit_is_visible_on_next_run(
        self, kb: KnowledgeBase, kb_root: Path, doc: DocFactory
    ) -> None:
        (kb_root / "data-structures" / "trees" / "binary-search-tree.md").write_text(
            doc(
                title="Binary Search Tree",
                category="data-structures",
                tags=["trees"],
                status="evergreen",
                created="2024-01-02",
                updated="2024-04-01",
            ),
            encoding="utf-8",
        )
        rows = QueryService(kb).run_document("data-structures/index.md").data["results"][0]["rows"]
        assert rows[0]["path"] == "data-structures/trees/binary-search-tree.md"
        assert len(rows) == 3

    def test_absolute_path_accepted(self, kb: KnowledgeBase, kb_root: Path) -> None:
        result = QueryService(kb).run_document(str(kb_root / "data-structures" / "index.md"))
        assert result.ok
        assert result.data["path"] == "data-structures/index.md"

    def test_document_without_directives(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).run_document("notes/orphan.md")
        assert result.ok
        assert result.data["results"] == []

    def test_rejected_document(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).run_document("algorithms/broken.md")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "REJECTED"
        assert result.error.detail["stage"] == "validate"

    def test_missing_document(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).run_document("nope.md")
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_directive_errors_become_warnings(
        self, make_kb: Callable[..., KnowledgeBase], doc: DocFactory
    ) -> None:
        body = "```query\nLIST\n```\n\n```query\nLIST\nSORT nothing\n```\n"
        kb = make_kb({"q.md": doc(title="Q", tags=[], body=body)})
        result = QueryService(kb).run_document("q.md")
        assert result.ok
        ok_result, bad_result = result.data["results"]
        assert ok_result["rows"] == [{"path": "q.md", "title": "Q"}]
        assert bad_result["error"]["kind"] == "unknown_field"
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("q.md:")


class TestEvaluateText:
    def test_adhoc_directive(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).evaluate_text('LIST\nWHERE contains(tags, "trees")')
        assert result.ok
        assert [row["path"] for row in result.data["rows"]] == [
            "data-structures/trees/avl-tree.md",
            "data-structures/trees/binary-search-tree.md",
        ]
        assert result.data["fields"] == ["path", "title"]

    def test_malformed(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).evaluate_text("WHERE x = 1")
        assert result.error is not None
        assert result.error.code == "INVALID_DIRECTIVE"

    def test_evaluation_error(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).evaluate_text("LIST\nSORT tags")
        assert result.error is not None
        assert result.error.code == "DIRECTIVE_ERROR"
        assert result.error.detail["kind"] == "unsortable"


class TestListDocuments:
    def test_filters_and_projection(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).list_documents(
            scope="data-structures",
            where=[("difficulty", "advanced")],
            fields=["status", "difficulty"],
        )
        assert result.data["rows"] == [
            {
                "path": "data-structures/trees/avl-tree.md",
                "status": "evergreen",
                "difficulty": "advanced",
            }
        ]
        assert result.data["fields"] == ["path", "status", "difficulty"]

    def test_sort_and_limit(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).list_documents(sort="date-created", descending=True, limit=2)
        assert [row["path"] for row in result.data["rows"]] == [
            "algorithms/dijkstra.md",
            "data-structures/trees/avl-tree.md",
        ]
        assert result.data["total"] == 6
        assert result.data["count"] == 2

    def test_unknown_field(self, kb: KnowledgeBase) -> None:
        result = QueryService(kb).list_documents(where=[("colour", "red")])
        assert result.error is not None
        assert result.error.detail["kind"] == "unknown_field"
