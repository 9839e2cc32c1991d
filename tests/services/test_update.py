"""Tests for UpdateService."""

from __future__ import annotations

from pathlib import Path

import pytest

from kbctl.domain.frontmatter import parse_frontmatter
from kbctl.infrastructure.knowledge_base import KnowledgeBase
from kbctl.services import update as update_module
from kbctl.services.update import UpdateService

BST = "data-structures/trees/binary-search-tree.md"


@pytest.fixture
def _fixed_today(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(update_module, "today_iso", lambda: "2024-06-01")


@pytest.mark.usefixtures("_fixed_today")
class TestUpdateService:
    def test_set_enum_and_refresh_updated(self, kb: KnowledgeBase, kb_root: Path) -> None:
        result = UpdateService(kb).update(BST, changes={"status": "evergreen"})
        assert result.ok
        assert result.data["fields"] == ["date-updated", "status"]
        assert result.data["metadata"]["date-updated"] == "2024-06-01"

        metadata, body, _ = parse_frontmatter((kb_root / BST).read_text(encoding="utf-8"))
        assert metadata["status"] == "evergreen"
        assert str(metadata["date-updated"]) == "2024-06-01"
        assert "[[avl-tree]]" in body

    def test_list_field_split_on_commas(self, kb: KnowledgeBase) -> None:
        result = UpdateService(kb).update(BST, changes={"tags": "trees, search ,bst"})
        assert result.data["metadata"]["tags"] == ["trees", "search", "bst"]

    def test_keys_keep_canonical_order(self, kb: KnowledgeBase, kb_root: Path) -> None:
        UpdateService(kb).update(BST, changes={"zeta": "z", "aliases": "bst"})
        text = (kb_root / BST).read_text(encoding="utf-8")
        block = text.split("---\n")[1]
        keys = [line.split(":", 1)[0] for line in block.splitlines() if line[:1].isalpha()]
        assert keys.index("title") < keys.index("aliases") < keys.index("date-created")
        assert keys[-1] == "zeta"

    def test_explicit_updated_date_kept(self, kb: KnowledgeBase) -> None:
        result = UpdateService(kb).update(BST, changes={"date-updated": "2024-02-02"})
        assert result.data["metadata"]["date-updated"] == "2024-02-02"

    def test_unset_field(self, kb: KnowledgeBase, kb_root: Path) -> None:
        result = UpdateService(kb).update(BST, unset=["difficulty"])
        assert result.ok
        metadata, _, _ = parse_frontmatter((kb_root / BST).read_text(encoding="utf-8"))
        assert "difficulty" not in metadata

    def test_invalid_change_leaves_file_untouched(self, kb: KnowledgeBase, kb_root: Path) -> None:
        before = (kb_root / BST).read_text(encoding="utf-8")
        result = UpdateService(kb).update(BST, changes={"status": "rotten"}, unset=["title"])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        fields = {issue["field"] for issue in result.error.detail["issues"]}
        assert fields == {"status", "title"}
        assert (kb_root / BST).read_text(encoding="utf-8") == before

    def test_updated_never_before_created(self, kb: KnowledgeBase, kb_root: Path) -> None:
        result = UpdateService(kb).update(BST, changes={"date-created": "2024-09-09"})
        assert result.ok
        assert result.data["metadata"]["date-updated"] == "2024-09-09"

    def test_missing_document(self, kb: KnowledgeBase) -> None:
        result = UpdateService(kb).update("nope.md", changes={"status": "seed"})
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_path_outside_root(self, kb: KnowledgeBase) -> None:
        result = UpdateService(kb).update("../elsewhere.md", changes={"status": "seed"})
        assert result.error is not None
        assert result.error.code == "INVALID_PATH"

    def test_broken_frontmatter(self, kb: KnowledgeBase, kb_root: Path) -> None:
        (kb_root / "notes" / "bad.md").write_text("---\ntitle: x\n", encoding="utf-8")
        result = UpdateService(kb).update("notes/bad.md", changes={"status": "seed"})
        assert result.error is not None
        assert result.error.code == "PARSE_ERROR"

    def test_impossible_date_reported_not_raised(self, kb: KnowledgeBase, kb_root: Path) -> None:
        original = "---\ntitle: Odd\ncategory: notes\ntags: [x]\ndate-created: 2024-02-30\n---\n"
        (kb_root / "notes" / "odd.md").write_text(original, encoding="utf-8")
        result = UpdateService(kb).update("notes/odd.md", changes={"status": "seed"})
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        assert (kb_root / "notes" / "odd.md").read_text(encoding="utf-8") == original
