"""Shared pytest fixtures for kbctl tests.

``kb_root`` is the single sample knowledge base most tests run against:

    data-structures/index.md                       index, query block
    data-structures/hash-table.md                  evergreen
    data-structures/trees/avl-tree.md              evergreen, one dangling link
    data-structures/trees/binary-search-tree.md    budding
    algorithms/dijkstra.md                         seed, links inside code
    algorithms/broken.md                           missing title (rejected)
    notes/orphan.md                                no links either way
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, TypeAlias

import pytest
from click.testing import CliRunner

from kbctl.config.settings import KbSettings
from kbctl.infrastructure.knowledge_base import KnowledgeBase

DocFactory: TypeAlias = Callable[..., str]


def render_doc(
    *,
    title: str | None = "Untitled",
    category: str | None = "misc",
    tags: list[str] | None = None,
    created: str | None = "2024-01-01",
    updated: str | None = "2024-01-02",
    body: str = "",
    **extra: Any,
) -> str:
    """Build document text with frontmatter keys in a fixed order.

    Keyword names use underscores; ``None`` omits the key. Extra keys are
    written after the built-in ones with underscores turned into dashes.
    """
    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if category is not None:
        lines.append(f"category: {category}")
    if tags is not None:
        lines.append(f"tags: [{', '.join(tags)}]")
    for key, value in extra.items():
        if value is None:
            continue
        if isinstance(value, list):
            value = f"[{', '.join(value)}]"
        lines.append(f"{key.replace('_', '-')}: {value}")
    if created is not None:
        lines.append(f"date-created: {created}")
    if updated is not None:
        lines.append(f"date-updated: {updated}")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


def write_doc(root: Path, rel: str, text: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


INDEX_BODY = """\
# Data Structures

```query
TABLE title, date-updated
FROM "data-structures"
WHERE status = "evergreen"
SORT date-updated DESC
```
"""

DIJKSTRA_BODY = """\
Uses a priority queue and a [[hash-table]] for distances.

```python
graph = "[[not-a-link]]"
```

Inline `[[also-not-a-link]]` code.
"""


def populate_sample(root: Path) -> None:
    write_doc(
        root,
        "data-structures/index.md",
        render_doc(
            title="Data Structures",
            category="data-structures",
            tags=["index"],
            created="2024-01-01",
            updated="2024-03-01",
            body=INDEX_BODY,
        ),
    )
    write_doc(
        root,
        "data-structures/hash-table.md",
        render_doc(
            title="Hash Table",
            category="data-structures",
            tags=["hashing"],
            difficulty="beginner",
            status="evergreen",
            created="2024-01-03",
            updated="2024-01-20",
            body="Hash tables map keys to values.\n",
        ),
    )
    write_doc(
        root,
        "data-structures/trees/avl-tree.md",
        render_doc(
            title="AVL Tree",
            category="data-structures",
            tags=["trees", "balanced"],
            difficulty="advanced",
            status="evergreen",
            created="2024-01-05",
            updated="2024-02-10",
            body="An AVL tree is a self-balancing [[binary-search-tree]].\n\n"
            "Compare with [[red-black-tree]].\n",
        ),
    )
    write_doc(
        root,
        "data-structures/trees/binary-search-tree.md",
        render_doc(
            title="Binary Search Tree",
            category="data-structures",
            tags=["trees"],
            difficulty="intermediate",
            status="budding",
            created="2024-01-02",
            updated="2024-01-15",
            body="An [[avl-tree]] keeps a BST balanced. "
            "See also [[data-structures/hash-table|hashing]].\n",
        ),
    )
    write_doc(
        root,
        "algorithms/dijkstra.md",
        render_doc(
            title="Dijkstra's Algorithm",
            category="algorithms",
            tags=["graphs", "shortest-path"],
            difficulty="intermediate",
            status="seed",
            created="2024-02-01",
            updated="2024-02-05",
            body=DIJKSTRA_BODY,
        ),
    )
    write_doc(
        root,
        "algorithms/broken.md",
        render_doc(title=None, category="algorithms", tags=["draft"], body="No title here.\n"),
    )
    write_doc(
        root,
        "notes/orphan.md",
        render_doc(
            title="Loose Thought",
            category="notes",
            tags=["misc"],
            status="seed",
            body="Nothing links here.\n",
        ),
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's KBCTL_* environment out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("KBCTL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def doc() -> DocFactory:
    """The :func:`render_doc` document builder."""
    return render_doc


@pytest.fixture
def kb_root(tmp_path: Path) -> Path:
    """Sample knowledge base with an empty ``kbctl.toml`` at its root."""
    (tmp_path / "kbctl.toml").write_text("", encoding="utf-8")
    populate_sample(tmp_path)
    return tmp_path


@pytest.fixture
def kb(kb_root: Path) -> Iterator[KnowledgeBase]:
    """KnowledgeBase over the sample corpus."""
    knowledge_base = KnowledgeBase(KbSettings.from_cli(root=kb_root))
    try:
        yield knowledge_base
    finally:
        knowledge_base.close()


@pytest.fixture
def make_kb(tmp_path: Path) -> Iterator[Callable[..., KnowledgeBase]]:
    """Factory for a KnowledgeBase over ``tmp_path`` with custom documents.

    Call as ``make_kb({"a.md": text, ...}, toml="...")``.
    """
    opened: list[KnowledgeBase] = []

    def factory(files: dict[str, str], *, toml: str = "") -> KnowledgeBase:
        (tmp_path / "kbctl.toml").write_text(toml, encoding="utf-8")
        for rel, text in files.items():
            write_doc(tmp_path, rel, text)
        knowledge_base = KnowledgeBase(KbSettings.from_cli(root=tmp_path))
        opened.append(knowledge_base)
        return knowledge_base

    yield factory
    for knowledge_base in opened:
        knowledge_base.close()


@pytest.fixture
def _isolated_kb(kb_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from inside the sample knowledge base."""
    monkeypatch.chdir(kb_root)
