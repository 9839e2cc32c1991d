"""Error taxonomy: exceptions for fatal-per-unit failures, records for reports.

Every failure is scoped to the smallest unit that caused it: one document
(parse, validation, store conflicts) or one directive. Nothing here aborts
a corpus-wide run; services collect these into a batch report.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from kbctl.domain.types import DirectiveErrorKind, IssueKind

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class KbError(Exception):
    """Base class for kbctl domain errors."""


class ParseError(KbError):
    """Malformed frontmatter block or unreadable document text."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class DuplicateIdentifierError(KbError):
    """Another document already owns the same identifier."""

    def __init__(self, name: str, path: str, existing_path: str) -> None:
        self.name = name
        self.path = path
        self.existing_path = existing_path
        super().__init__(f"Identifier {name!r} of {path} is already used by {existing_path}")


class DuplicateIndexError(KbError):
    """A category already has a different index document."""

    def __init__(self, category: str, path: str, existing_path: str) -> None:
        self.category = category
        self.path = path
        self.existing_path = existing_path
        label = category or "(root)"
        super().__init__(f"Category {label} already has index document {existing_path}")


# ---------------------------------------------------------------------------
# Report records
# ---------------------------------------------------------------------------


class ValidationIssue(BaseModel):
    """One metadata problem found on a document."""

    model_config = {"frozen": True}

    kind: IssueKind
    field: str | None = None
    message: str


class RejectedDocument(BaseModel):
    """A document excluded from the corpus, with every reason collected."""

    model_config = {"frozen": True}

    path: str
    stage: str  # parse | validate | index
    issues: list[ValidationIssue] = Field(default_factory=list)
    message: str | None = None


class DanglingLinkWarning(BaseModel):
    """A link whose target matches no document identifier."""

    model_config = {"frozen": True}

    source_path: str
    target_name: str
    line: int = 0


class DirectiveError(BaseModel):
    """Why a single query directive produced no result."""

    model_config = {"frozen": True}

    kind: DirectiveErrorKind
    message: str
    source_path: str | None = None
    line: int | None = None
