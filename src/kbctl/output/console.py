"""Rich Console factory and theme for kbctl output.

Consoles render into a StringIO buffer so renderers return strings. Rich
drops color codes by itself when output is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

KB_THEME = Theme(
    {
        "kb.ok": "bold green",
        "kb.error": "bold red",
        "kb.warning": "bold yellow",
        "kb.op": "bold cyan",
        "kb.key": "dim",
        "kb.path": "blue",
        "kb.title": "bold",
        "kb.kind.topic": "green",
        "kb.kind.index": "magenta",
        "kb.count": "bold",
    }
)

_KIND_STYLES: dict[str, str] = {
    "topic": "kb.kind.topic",
    "index": "kb.kind.index",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=KB_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    return _KIND_STYLES.get(kind, "")
