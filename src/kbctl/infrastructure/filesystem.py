"""Filesystem access for corpus sources.

INVARIANT: Files are truth. The SQLite snapshot is a derived artifact and
every command rebuilds the corpus from the files on disk.

The core only needs ``(identifier, raw text)`` pairs; this module turns a
content directory into that list and writes edited documents back.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

# Directories never scanned for documents.
DEFAULT_SKIP_DIRS = frozenset({".git", ".obsidian", ".kbctl", ".trash"})


@dataclass(frozen=True)
class SourceFile:
    """Raw text of one document, or the reason it could not be read."""

    path: str  # POSIX path relative to the content root
    text: str | None = None
    error: str | None = None


def find_document_files(
    content_root: Path,
    *,
    extensions: Iterable[str] = (".md",),
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> list[Path]:
    """Discover document files under *content_root*, sorted by path."""
    if not content_root.is_dir():
        return []
    suffixes = {ext if ext.startswith(".") else f".{ext}" for ext in extensions}
    skipped = set(skip_dirs)
    results: list[Path] = []
    for path in content_root.rglob("*"):
        if not path.is_file() or path.suffix not in suffixes:
            continue
        relative = path.relative_to(content_root)
        if any(part in skipped for part in relative.parts[:-1]):
            continue
        results.append(path)
    return sorted(results)


def read_sources(
    content_root: Path,
    *,
    extensions: Iterable[str] = (".md",),
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> list[SourceFile]:
    """Read every document under *content_root*.

    Unreadable files are returned with ``error`` set rather than raised,
    so one bad file cannot abort a batch.
    """
    sources: list[SourceFile] = []
    for path in find_document_files(content_root, extensions=extensions, skip_dirs=skip_dirs):
        rel = path.relative_to(content_root).as_posix()
        try:
            sources.append(SourceFile(path=rel, text=path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as exc:
            sources.append(SourceFile(path=rel, error=f"Cannot read file: {exc}"))
    return sources


def resolve_document_path(content_root: Path, relative: str) -> Path:
    """Resolve a corpus path to a file, refusing paths outside the root."""
    result = content_root / relative
    if not result.resolve().is_relative_to(content_root.resolve()):
        msg = f"Path escapes content root: {relative}"
        raise ValueError(msg)
    return result


def write_document_file(path: Path, content: str) -> None:
    """Write document text, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
