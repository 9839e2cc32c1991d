"""Metadata field tables: which keys a document must or may carry.

Metadata is a loosely typed mapping. Instead of one fixed struct, each
category resolves a field table: the built-in fields below, plus globally
declared extras, plus extras declared for any category prefix covering it.
Keys outside the table are accepted untyped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from kbctl.domain.types import Difficulty, DocumentKind, FieldType, Maturity

TITLE = "title"
CATEGORY = "category"
TAGS = "tags"
DIFFICULTY = "difficulty"
STATUS = "status"
SOURCES = "sources"
ALIASES = "aliases"
DATE_CREATED = "date-created"
DATE_UPDATED = "date-updated"

# Computed from the document rather than its metadata.
PSEUDO_FIELDS: frozenset[str] = frozenset({"path", "name"})


@dataclass(frozen=True)
class FieldSpec:
    """Type and presence rule for one metadata key."""

    name: str
    type: FieldType
    required: bool = False
    choices: tuple[str, ...] = ()


def normalize_prefix(prefix: str) -> str:
    """Strip surrounding slashes and a leading ``./`` from a path prefix."""
    cleaned = prefix.strip().strip("/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    return "" if cleaned == "." else cleaned


def covers(prefix: str, category: str) -> bool:
    """Return True if category *prefix* includes *category*.

    The empty prefix covers the whole corpus.

    Examples:
        >>> covers("data-structures", "data-structures/trees")
        True
        >>> covers("data", "data-structures")
        False
    """
    prefix = normalize_prefix(prefix)
    if not prefix:
        return True
    return category == prefix or category.startswith(prefix + "/")


@dataclass(frozen=True)
class Schema:
    """Category-aware metadata schema."""

    index_marker: str = "index"
    index_names: tuple[str, ...] = ("index", "_index")
    difficulty_levels: tuple[str, ...] = tuple(str(d) for d in Difficulty)
    status_levels: tuple[str, ...] = tuple(str(m) for m in Maturity)
    extra_fields: Mapping[str, FieldType] = field(default_factory=dict)
    category_fields: Mapping[str, Mapping[str, FieldType]] = field(default_factory=dict)

    def builtin_fields(self) -> dict[str, FieldSpec]:
        return {
            TITLE: FieldSpec(TITLE, FieldType.STRING, required=True),
            CATEGORY: FieldSpec(CATEGORY, FieldType.STRING, required=True),
            TAGS: FieldSpec(TAGS, FieldType.LIST, required=True),
            DATE_CREATED: FieldSpec(DATE_CREATED, FieldType.DATE, required=True),
            DATE_UPDATED: FieldSpec(DATE_UPDATED, FieldType.DATE, required=True),
            DIFFICULTY: FieldSpec(DIFFICULTY, FieldType.ENUM, choices=self.difficulty_levels),
            STATUS: FieldSpec(STATUS, FieldType.ENUM, choices=self.status_levels),
            SOURCES: FieldSpec(SOURCES, FieldType.LIST),
            ALIASES: FieldSpec(ALIASES, FieldType.LIST),
        }

    def fields_for(self, category: str) -> dict[str, FieldSpec]:
        """Resolve the field table for documents in *category*.

        Built-in fields cannot be retyped by extras.
        """
        table = self.builtin_fields()
        for name, ftype in self.extra_fields.items():
            table.setdefault(name, FieldSpec(name, FieldType(ftype)))
        for prefix in sorted(self.category_fields, key=len):
            if covers(prefix, category):
                for name, ftype in self.category_fields[prefix].items():
                    table.setdefault(name, FieldSpec(name, FieldType(ftype)))
        return table

    def field_type(self, name: str) -> FieldType | None:
        """Declared type of *name* in any category, or None if untyped."""
        builtin = self.builtin_fields()
        if name in builtin:
            return builtin[name].type
        if name in self.extra_fields:
            return FieldType(self.extra_fields[name])
        for fields in self.category_fields.values():
            if name in fields:
                return FieldType(fields[name])
        return None

    def known_fields(self) -> set[str]:
        """Every field name declared anywhere in the schema."""
        names = set(self.builtin_fields()) | set(self.extra_fields)
        for fields in self.category_fields.values():
            names |= set(fields)
        return names

    def detect_kind(self, name: str, tags: list[str]) -> DocumentKind:
        """Index documents carry the marker tag or use a reserved file name."""
        if self.index_marker in tags or name in self.index_names:
            return DocumentKind.INDEX
        return DocumentKind.TOPIC
