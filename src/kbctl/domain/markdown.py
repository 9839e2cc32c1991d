"""Markdown code-region scanning.

Link and directive extraction is text scanning, not full Markdown parsing.
Fenced blocks and inline code spans are located here so extractors can
skip them wholesale: example syntax inside code must never produce links.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

# Up to three spaces of indent, then ``` or ~~~ (3+), then an info string.
_FENCE_OPEN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>[^`]*)$")
_INLINE_CODE = re.compile(r"(`+)(?!`).+?(?<!`)\1(?!`)")


@dataclass(frozen=True)
class FencedBlock:
    """A fenced code block found in body text."""

    info: str  # first word of the info string, e.g. "python"
    content: str
    line: int  # zero-based line index of the opening fence
    end: int  # zero-based line index of the closing fence, or the last line


def _is_closing(line: str, fence: str) -> bool:
    stripped = line.strip()
    return (
        len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
        and len(line) - len(line.lstrip(" ")) <= 3
    )


def iter_fenced_blocks(text: str) -> Iterator[FencedBlock]:
    """Yield every fenced block in *text*.

    An unclosed fence runs to the end of the text.
    """
    lines = text.split("\n")
    i = 0
    while i < len(lines):
        match = _FENCE_OPEN.match(lines[i])
        if match is None:
            i += 1
            continue
        fence = match.group("fence")
        info_words = match.group("info").split()
        start = i
        content: list[str] = []
        i += 1
        while i < len(lines) and not _is_closing(lines[i], fence):
            content.append(lines[i])
            i += 1
        yield FencedBlock(
            info=info_words[0] if info_words else "",
            content="\n".join(content),
            line=start,
            end=min(i, len(lines) - 1),
        )
        i += 1


def mask_code(text: str) -> str:
    """Blank out fenced blocks and inline code, keeping line structure.

    Masked fence lines become empty and inline spans become spaces, so
    line numbers computed on the result match the original text.
    """
    lines = text.split("\n")
    masked = list(lines)
    for block in iter_fenced_blocks(text):
        for idx in range(block.line, block.end + 1):
            masked[idx] = ""
    return "\n".join(
        _INLINE_CODE.sub(lambda m: " " * len(m.group(0)), line) for line in masked
    )
