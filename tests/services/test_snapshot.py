"""Tests for SnapshotService."""

from __future__ import annotations

from kbctl.infrastructure.knowledge_base import KnowledgeBase
from kbctl.services.snapshot import SnapshotService


class TestSnapshotService:
    def test_show_without_snapshot(self, kb: KnowledgeBase) -> None:
        result = SnapshotService(kb).show()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NO_SNAPSHOT"
        assert not kb.db_path.exists()

    def test_save_then_show(self, kb: KnowledgeBase) -> None:
        saved = SnapshotService(kb).save()
        assert saved.ok
        assert saved.data["documents"] == 6
        assert saved.data["links"] == 5
        assert saved.data["rejected"] == 1
        assert kb.db_path.is_file()

        shown = SnapshotService(kb).show()
        assert shown.ok
        assert shown.data["counts"] == {"documents": 6, "links": 5, "dangling": 1}
        assert shown.data["saved_at"]
        assert [d["path"] for d in shown.data["documents"]][0] == "algorithms/dijkstra.md"

    def test_save_twice_replaces(self, kb: KnowledgeBase) -> None:
        SnapshotService(kb).save()
        (kb.content_root / "notes" / "orphan.md").unlink()
        SnapshotService(kb).save()
        assert SnapshotService(kb).show().data["counts"]["documents"] == 5
