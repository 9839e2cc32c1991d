"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, kbctl.toml only contains overrides.
An empty file (or none at all) gives a working knowledge base rooted at the
config directory.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from kbctl.domain.schema import Schema, normalize_prefix
from kbctl.domain.types import Difficulty, FieldType, Maturity
from kbctl.infrastructure.database.engine import DEFAULT_DB_FILENAME
from kbctl.infrastructure.filesystem import DEFAULT_SKIP_DIRS

# --- kbctl.toml sections ---


class CorpusConfig(BaseModel):
    """[corpus] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    content_dir: str = "."
    skip_dirs: list[str] = Field(default_factory=lambda: sorted(DEFAULT_SKIP_DIRS))
    extensions: list[str] = Field(default_factory=lambda: [".md"])


class MetadataConfig(BaseModel):
    """[metadata] section.

    ``extra_fields`` declares additional typed fields for every category;
    ``category_fields`` maps a category prefix to fields that apply only
    beneath it::

        [metadata.category_fields."algorithms"]
        complexity = "string"
    """

    model_config = {"frozen": True, "extra": "forbid"}

    index_marker: str = "index"
    index_names: list[str] = Field(default_factory=lambda: ["index", "_index"])
    difficulty_levels: list[str] = Field(default_factory=lambda: [str(d) for d in Difficulty])
    status_levels: list[str] = Field(default_factory=lambda: [str(m) for m in Maturity])
    extra_fields: dict[str, FieldType] = Field(default_factory=dict)
    category_fields: dict[str, dict[str, FieldType]] = Field(default_factory=dict)

    @field_validator("category_fields")
    @classmethod
    def _normalize_prefixes(
        cls, value: dict[str, dict[str, FieldType]]
    ) -> dict[str, dict[str, FieldType]]:
        return {normalize_prefix(prefix): fields for prefix, fields in value.items()}

    def to_schema(self) -> Schema:
        return Schema(
            index_marker=self.index_marker,
            index_names=tuple(self.index_names),
            difficulty_levels=tuple(self.difficulty_levels),
            status_levels=tuple(self.status_levels),
            extra_fields=dict(self.extra_fields),
            category_fields={k: dict(v) for k, v in self.category_fields.items()},
        )


class QueryConfig(BaseModel):
    """[query] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    fence_tag: str = "query"


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_workers: int = Field(default=4, ge=1)


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    filename: str = DEFAULT_DB_FILENAME
