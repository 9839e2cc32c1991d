"""Tests for CheckService."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from kbctl.infrastructure.knowledge_base import KnowledgeBase
from kbctl.services.check import CheckService

DocFactory: TypeAlias = Callable[..., str]


class TestCheckService:
    def test_sample_report(self, kb: KnowledgeBase) -> None:
        result = CheckService(kb).check()
        assert result.ok
        assert result.op == "check"
        assert result.data["counts"] == {
            "scanned": 7,
            "accepted": 6,
            "rejected": 1,
            "links": 5,
            "dangling": 1,
            "directive_errors": 0,
        }

    def test_rejected_document_lists_every_issue(self, kb: KnowledgeBase) -> None:
        [rejected] = CheckService(kb).check().data["rejected"]
        assert rejected["path"] == "algorithms/broken.md"
        assert rejected["stage"] == "validate"
        assert [issue["field"] for issue in rejected["issues"]] == ["title"]

    def test_dangling_report(self, kb: KnowledgeBase) -> None:
        [dangling] = CheckService(kb).check().data["dangling"]
        assert dangling == {
            "source_path": "data-structures/trees/avl-tree.md",
            "target_name": "red-black-tree",
            "line": 12,
        }

    def test_directive_errors_reported(
        self, make_kb: Callable[..., KnowledgeBase], doc: DocFactory
    ) -> None:
        body = '```query\nLIST\nWHERE colour = "red"\n```\n\n```query\nLIST\nSORT tags\n```\n'
        kb = make_kb({"notes/q.md": doc(title="Q", tags=[], body=body)})
        result = CheckService(kb).check()
        errors = result.data["directive_errors"]
        assert [e["kind"] for e in errors] == ["unknown_field", "unsortable"]
        assert all(e["source_path"] == "notes/q.md" for e in errors)
        assert result.data["counts"]["accepted"] == 1

    def test_malformed_directive_does_not_reject_topic(
        self, make_kb: Callable[..., KnowledgeBase], doc: DocFactory
    ) -> None:
        kb = make_kb({"q.md": doc(title="Q", tags=[], body="```query\nSELECT *\n```\n")})
        data = CheckService(kb).check().data
        assert data["counts"]["accepted"] == 1
        assert data["directive_errors"][0]["kind"] == "malformed"
