"""A document: one content unit with metadata, body and extracted references.

Documents are frozen. Any change (metadata edit, re-parse) produces a new
instance, which is what lets the corpus swap versions atomically.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, Field

from kbctl.domain.directives import QueryDirective
from kbctl.domain.links import WikiLink
from kbctl.domain.schema import TAGS, TITLE
from kbctl.domain.types import DocumentKind


def category_of(path: str) -> str:
    """Category prefix of a corpus path: its directory, ``""`` at the root.

    Examples:
        >>> category_of("data-structures/trees/avl.md")
        'data-structures/trees'
        >>> category_of("readme.md")
        ''
    """
    parent = PurePosixPath(path).parent.as_posix()
    return "" if parent == "." else parent


def name_of(path: str) -> str:
    """Identifier of a corpus path: the file stem."""
    return PurePosixPath(path).stem


class Document(BaseModel):
    """A parsed document.

    Attributes:
        path: POSIX path relative to the corpus root. Unique and stable.
        metadata: Frontmatter mapping. After validation dates are ISO
            strings and list fields are lists of strings.
        body: Text after the frontmatter block.
        links_out: Wikilinks found outside code regions.
        directives: Query directives found in tagged fenced blocks.
        kind: Topic note or category index.
    """

    model_config = {"frozen": True}

    path: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    body: str = ""
    links_out: tuple[WikiLink, ...] = ()
    directives: tuple[QueryDirective, ...] = ()
    kind: DocumentKind = DocumentKind.TOPIC

    @property
    def name(self) -> str:
        return name_of(self.path)

    @property
    def category(self) -> str:
        return category_of(self.path)

    @property
    def title(self) -> str:
        return str(self.metadata.get(TITLE) or "")

    @property
    def tags(self) -> list[str]:
        tags = self.metadata.get(TAGS)
        return [str(t) for t in tags] if isinstance(tags, list) else []

    @property
    def is_index(self) -> bool:
        return self.kind == DocumentKind.INDEX

    def identifiers(self) -> tuple[str, ...]:
        """Every string a link target may use to reach this document."""
        bare = self.path[:-3] if self.path.endswith(".md") else self.path
        return tuple(dict.fromkeys((self.name, bare, self.path)))

    def field_value(self, field: str) -> Any:
        """Value of a metadata field or of the ``path``/``name`` pseudo-fields."""
        if field == "path":
            return self.path
        if field == "name":
            return self.name
        return self.metadata.get(field)

    def summary(self) -> dict[str, Any]:
        """Compact JSON-safe view used in service payloads."""
        return {
            "path": self.path,
            "name": self.name,
            "title": self.title,
            "kind": str(self.kind),
            "category": self.category,
        }
