"""Document parser: raw text to :class:`Document`.

Pure transformation: no I/O, no corpus access. Parse failures raise
:class:`ParseError` carrying the document path; they never affect other
documents.
"""

from __future__ import annotations

from kbctl.domain.directives import extract_directives
from kbctl.domain.document import Document, name_of
from kbctl.domain.errors import ParseError
from kbctl.domain.frontmatter import parse_frontmatter
from kbctl.domain.links import extract_wikilinks
from kbctl.domain.schema import TAGS, Schema


def parse_document(
    path: str,
    text: str,
    *,
    schema: Schema | None = None,
    fence_tag: str = "query",
) -> Document:
    """Split frontmatter from body and extract links and directives.

    A document without a frontmatter block parses with empty metadata;
    the validator rejects it for missing fields.

    Raises:
        ParseError: Malformed frontmatter block.
    """
    schema = schema or Schema()
    try:
        metadata, body, offset = parse_frontmatter(text)
    except ParseError as exc:
        raise ParseError(exc.message, path=path) from exc

    raw_tags = metadata.get(TAGS)
    tags = [str(t) for t in raw_tags] if isinstance(raw_tags, list) else []

    return Document(
        path=path,
        metadata=metadata,
        body=body,
        links_out=tuple(extract_wikilinks(body, line_offset=offset)),
        directives=tuple(extract_directives(body, fence_tag=fence_tag, line_offset=offset)),
        kind=schema.detect_kind(name_of(path), tags),
    )
