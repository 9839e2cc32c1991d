"""Classification enums for documents, metadata fields and report records."""

from __future__ import annotations

from enum import StrEnum


class DocumentKind(StrEnum):
    """Topic notes carry content; index documents summarize a category."""

    TOPIC = "topic"
    INDEX = "index"


class Difficulty(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Maturity(StrEnum):
    """Content maturity levels accepted by the ``status`` field."""

    SEED = "seed"
    BUDDING = "budding"
    EVERGREEN = "evergreen"


class FieldType(StrEnum):
    """Value types a metadata field can be declared with."""

    STRING = "string"
    LIST = "list"
    DATE = "date"
    ENUM = "enum"


class IssueKind(StrEnum):
    """Kinds of metadata validation failures."""

    MISSING_FIELD = "missing_field"
    WRONG_TYPE = "wrong_type"
    INVALID_DATE = "invalid_date"
    INVALID_VALUE = "invalid_value"
    SCOPE = "scope"


class DirectiveErrorKind(StrEnum):
    MALFORMED = "malformed"
    UNKNOWN_FIELD = "unknown_field"
    INVALID_LITERAL = "invalid_literal"
    UNSORTABLE = "unsortable"
