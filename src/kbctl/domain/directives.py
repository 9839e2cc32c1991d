"""Query directives: the mini-language embedded in fenced blocks.

Index documents summarize their category with blocks like::

    ```query
    TABLE title, difficulty, date-updated
    FROM "data-structures"
    WHERE status = "evergreen" AND contains(tags, "trees")
    SORT date-updated DESC
    LIMIT 10
    ```

Clauses are one per line, keywords are case-insensitive. Conditions are
ANDed; the format has no OR or NOT. ``LIST`` is shorthand for
``TABLE title``. A directive that fails to parse is still returned, with
``error`` set, so callers can surface it instead of dropping results.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel

from kbctl.domain.markdown import iter_fenced_blocks
from kbctl.domain.schema import TITLE, normalize_prefix

_FIELD = r"[A-Za-z_][\w.-]*"
_LITERAL = r"\"[^\"]*\"|'[^']*'|[^\s\"'(),]+"

_FIELD_RE = re.compile(rf"^{_FIELD}$")
_EQUALS_RE = re.compile(rf"^(?P<field>{_FIELD})\s*=\s*(?P<value>{_LITERAL})$")
_CONTAINS_RE = re.compile(
    rf"^contains\(\s*(?P<field>{_FIELD})\s*,\s*(?P<value>{_LITERAL})\s*\)$",
    re.IGNORECASE,
)
_FROM_RE = re.compile(r"^(\"[^\"]*\"|'[^']*')$")
_SORT_RE = re.compile(
    rf"^(?P<field>{_FIELD})(?:\s+(?P<dir>asc|desc|ascending|descending))?$",
    re.IGNORECASE,
)
_QUOTED = re.compile(r"\"[^\"]*\"|'[^']*'")
_AND_OR_QUOTED = re.compile(r"\"[^\"]*\"|'[^']*'|\s+AND\s+", re.IGNORECASE)
_OR_NOT = re.compile(r"(\s|^)(OR|NOT)(\s|$)|!=|!\s*contains", re.IGNORECASE)

OP_EQ = "eq"
OP_CONTAINS = "contains"


class Predicate(BaseModel):
    """A single field comparison: equality or list membership."""

    model_config = {"frozen": True}

    field: str
    value: str
    op: str = OP_EQ


class SortOrder(BaseModel):
    model_config = {"frozen": True}

    field: str
    descending: bool = False


class QueryDirective(BaseModel):
    """Immutable filter/sort/limit request over document metadata."""

    model_config = {"frozen": True}

    scope: str = ""
    predicates: tuple[Predicate, ...] = ()
    projection: tuple[str, ...] = (TITLE,)
    order: SortOrder | None = None
    limit: int | None = None
    source: str = ""
    line: int = 0
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


class _DirectiveSyntaxError(ValueError):
    pass


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "\"'":
        return literal[1:-1]
    return literal


def _parse_projection(keyword: str, rest: str) -> tuple[str, ...]:
    if keyword == "LIST":
        if rest:
            msg = "LIST takes no fields; use TABLE to choose fields"
            raise _DirectiveSyntaxError(msg)
        return (TITLE,)
    if not rest:
        return (TITLE,)
    fields = tuple(part.strip() for part in rest.split(","))
    for name in fields:
        if not _FIELD_RE.match(name):
            msg = f"Invalid field name in TABLE: {name!r}"
            raise _DirectiveSyntaxError(msg)
    return fields


def _split_and(text: str) -> list[str]:
    """Split on AND keywords that sit outside quoted literals."""
    parts: list[str] = []
    start = 0
    for match in _AND_OR_QUOTED.finditer(text):
        if match.group(0)[0] in "\"'":
            continue
        parts.append(text[start : match.start()])
        start = match.end()
    parts.append(text[start:])
    return parts


def _parse_conditions(rest: str) -> list[Predicate]:
    if not rest:
        msg = "WHERE needs at least one condition"
        raise _DirectiveSyntaxError(msg)
    if _OR_NOT.search(_QUOTED.sub("\"\"", rest)):
        msg = "Only AND-ed equality and contains() conditions are supported"
        raise _DirectiveSyntaxError(msg)

    predicates: list[Predicate] = []
    for condition in _split_and(rest):
        condition = condition.strip()
        if match := _CONTAINS_RE.match(condition):
            op = OP_CONTAINS
        elif match := _EQUALS_RE.match(condition):
            op = OP_EQ
        else:
            msg = f"Cannot parse condition: {condition!r}"
            raise _DirectiveSyntaxError(msg)
        predicates.append(
            Predicate(field=match.group("field"), value=_unquote(match.group("value")), op=op)
        )
    return predicates


def _parse_clauses(source: str) -> dict[str, Any]:
    parsed: dict[str, Any] = {}
    predicates: list[Predicate] = []
    lines = [
        ln.strip() for ln in source.split("\n") if ln.strip() and not ln.strip().startswith("//")
    ]
    if not lines:
        msg = "Empty query directive"
        raise _DirectiveSyntaxError(msg)

    for position, line in enumerate(lines):
        keyword, _, rest = line.partition(" ")
        keyword = keyword.upper()
        rest = rest.strip()

        if keyword in ("TABLE", "LIST"):
            if position != 0:
                msg = f"{keyword} must be the first clause"
                raise _DirectiveSyntaxError(msg)
            parsed["projection"] = _parse_projection(keyword, rest)
            continue
        if position == 0:
            msg = "Directive must start with TABLE or LIST"
            raise _DirectiveSyntaxError(msg)
        if keyword == "WHERE":
            predicates.extend(_parse_conditions(rest))
            continue
        if keyword in parsed:
            msg = f"Duplicate {keyword} clause"
            raise _DirectiveSyntaxError(msg)

        if keyword == "FROM":
            if not _FROM_RE.match(rest):
                msg = f'FROM expects a quoted path prefix, e.g. FROM "notes", got {rest!r}'
                raise _DirectiveSyntaxError(msg)
            parsed["FROM"] = normalize_prefix(_unquote(rest))
        elif keyword == "SORT":
            match = _SORT_RE.match(rest)
            if match is None:
                msg = f"SORT expects 'field [ASC|DESC]', got {rest!r}"
                raise _DirectiveSyntaxError(msg)
            direction = (match.group("dir") or "asc").lower()
            parsed["SORT"] = SortOrder(
                field=match.group("field"), descending=direction.startswith("desc")
            )
        elif keyword == "LIMIT":
            if not rest.isdigit():
                msg = f"LIMIT expects a non-negative integer, got {rest!r}"
                raise _DirectiveSyntaxError(msg)
            parsed["LIMIT"] = int(rest)
        else:
            msg = f"Unknown clause: {keyword}"
            raise _DirectiveSyntaxError(msg)

    parsed["WHERE"] = tuple(predicates)
    return parsed


def parse_directive(source: str, *, line: int = 0) -> QueryDirective:
    """Parse directive text. Never raises; failures set ``error``."""
    try:
        clauses = _parse_clauses(source)
    except _DirectiveSyntaxError as exc:
        return QueryDirective(source=source, line=line, error=str(exc))

    order = clauses.get("SORT")
    limit = clauses.get("LIMIT")
    return QueryDirective(
        scope=str(clauses.get("FROM", "")),
        predicates=clauses["WHERE"],
        projection=clauses["projection"],
        order=order if isinstance(order, SortOrder) else None,
        limit=limit if isinstance(limit, int) else None,
        source=source,
        line=line,
    )


def extract_directives(
    body: str,
    *,
    fence_tag: str = "query",
    line_offset: int = 0,
) -> list[QueryDirective]:
    """Extract every directive block tagged *fence_tag* from *body*.

    Fenced blocks with any other info string are code samples and are
    skipped. ``line`` on each directive is the 1-based file line of its
    opening fence.
    """
    return [
        parse_directive(block.content, line=line_offset + block.line + 1)
        for block in iter_fenced_blocks(body)
        if block.info == fence_tag
    ]
