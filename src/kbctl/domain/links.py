"""Wikilink extraction and link records.

Pure functions, no infrastructure dependencies. Code regions are masked
before scanning, so ``[[...]]`` inside fenced or inline code never counts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from kbctl.domain.markdown import mask_code

# [[Target]], [[Target|Display]], [[Target#Heading]], ![[Embed]]
_WIKILINK_PATTERN = re.compile(r"(?P<embed>!?)\[\[(?P<inner>[^\[\]\n]+)\]\]")


@dataclass(frozen=True)
class WikiLink:
    """A link reference extracted from body text."""

    target: str
    display: str | None = None
    heading: str | None = None
    embed: bool = False
    line: int = 0  # 1-based line in the source document


@dataclass(frozen=True)
class Link:
    """A link after resolution against the corpus.

    ``target_path`` is set only when ``resolved`` is True.
    """

    source_path: str
    target_name: str
    resolved: bool
    target_path: str | None = None
    line: int = 0


def extract_wikilinks(body: str, *, line_offset: int = 0) -> list[WikiLink]:
    """Extract all wikilinks from *body*, skipping code regions.

    *line_offset* is the zero-based line where *body* starts in its file,
    so reported lines are 1-based file lines. Links with an empty target
    (``[[#Heading]]`` or ``[[ ]]``) are ignored.
    """
    results: list[WikiLink] = []
    for idx, line in enumerate(mask_code(body).split("\n")):
        for match in _WIKILINK_PATTERN.finditer(line):
            inner = match.group("inner")
            target_part, _, display = inner.partition("|")
            target, _, heading = target_part.partition("#")
            target = target.strip()
            if not target:
                continue
            results.append(
                WikiLink(
                    target=target,
                    display=display.strip() or None,
                    heading=heading.strip() or None,
                    embed=bool(match.group("embed")),
                    line=line_offset + idx + 1,
                )
            )
    return results
