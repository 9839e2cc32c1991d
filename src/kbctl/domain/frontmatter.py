"""Frontmatter splitting, parsing and rendering.

A document opens with ``---`` on its first line; the next ``---`` line
closes the YAML block and everything after it is the body. Rendering
emits keys in :data:`CANONICAL_KEY_ORDER` so re-parsing a rendered
document yields the same metadata.
"""

from __future__ import annotations

from datetime import date
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.constructor import RoundTripConstructor
from ruamel.yaml.error import YAMLError
from ruamel.yaml.nodes import ScalarNode

from kbctl.domain.errors import ParseError
from kbctl.domain.schema import (
    ALIASES,
    CATEGORY,
    DATE_CREATED,
    DATE_UPDATED,
    DIFFICULTY,
    SOURCES,
    STATUS,
    TAGS,
    TITLE,
)

CANONICAL_KEY_ORDER: list[str] = [
    TITLE,
    CATEGORY,
    TAGS,
    DIFFICULTY,
    STATUS,
    SOURCES,
    ALIASES,
    DATE_CREATED,
    DATE_UPDATED,
]

_DELIMITER = "---"


class _LenientDateConstructor(RoundTripConstructor):
    """Keeps date-shaped scalars that are not real dates (2024-02-30) as text.

    The validator then reports them as invalid dates on the field instead of
    the whole block failing to load.
    """

    def construct_yaml_timestamp(self, node: ScalarNode, values: Any = None) -> Any:
        try:
            return super().construct_yaml_timestamp(node, values)
        except ValueError:
            return self.construct_scalar(node)


_LenientDateConstructor.add_constructor(
    "tag:yaml.org,2002:timestamp", _LenientDateConstructor.construct_yaml_timestamp
)


def _new_yaml() -> YAML:
    """Fresh round-trip parser per call; ruamel's YAML object is stateful."""
    y = YAML()
    y.Constructor = _LenientDateConstructor
    y.default_flow_style = False
    return y


def _plain(value: Any) -> Any:
    """Convert ruamel round-trip containers and scalars to builtin types."""
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, bool) or value is None or isinstance(value, date):
        return value
    if isinstance(value, str):
        return str(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    return value


def split_frontmatter(content: str) -> tuple[str | None, str, int]:
    """Split *content* into ``(yaml_block, body, body_line_offset)``.

    ``yaml_block`` is None when the text does not open with a delimiter.
    ``body_line_offset`` is the zero-based line where the body starts.

    Raises:
        ParseError: The opening delimiter has no closing delimiter.
    """
    normalized = content.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != _DELIMITER:
        return None, normalized, 0

    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == _DELIMITER:
            return "\n".join(lines[1:i]), "\n".join(lines[i + 1 :]), i + 1

    msg = "Frontmatter block opened with '---' but never closed"
    raise ParseError(msg)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str, int]:
    """Parse YAML frontmatter from markdown *content*.

    Returns ``(metadata, body, body_line_offset)``. Text without a
    frontmatter block yields empty metadata.

    Raises:
        ParseError: Unclosed block, invalid YAML, or a non-mapping block.
    """
    block, body, offset = split_frontmatter(content)
    if block is None:
        return {}, body, offset

    try:
        loaded = _new_yaml().load(block)
    except (YAMLError, ValueError) as exc:
        msg = f"Invalid YAML in frontmatter: {exc}"
        raise ParseError(msg) from exc

    if loaded is None:
        return {}, body, offset
    if not isinstance(loaded, dict):
        msg = f"Frontmatter must be a mapping, got {type(loaded).__name__}"
        raise ParseError(msg)
    return _plain(loaded), body, offset


def order_frontmatter(metadata: dict[str, Any]) -> dict[str, Any]:
    """Return *metadata* with canonical keys first, the rest alphabetically.

    ``None`` values are omitted.
    """
    ordered: dict[str, Any] = {}
    for key in CANONICAL_KEY_ORDER:
        if metadata.get(key) is not None:
            ordered[key] = metadata[key]
    for key in sorted(metadata):
        if key not in ordered and metadata[key] is not None:
            ordered[key] = metadata[key]
    return ordered


def render_frontmatter(metadata: dict[str, Any], body: str) -> str:
    """Render *metadata* and *body* back into document text."""
    buf = StringIO()
    ordered = order_frontmatter(metadata)
    if ordered:
        # Plain dicts are key-sorted on dump; CommentedMap keeps insertion order.
        _new_yaml().dump(CommentedMap(ordered), buf)
    return "".join([_DELIMITER, "\n", buf.getvalue(), _DELIMITER, "\n", body])
