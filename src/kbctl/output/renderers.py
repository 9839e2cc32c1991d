"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeAlias

from rich.markup import escape
from rich.table import Table
from rich.text import Text

from kbctl.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from kbctl.services.result import ServiceResult

Renderer: TypeAlias = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Paths only, one per line, for piping into other tools."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    d = result.data
    for key in ("items", "rows", "accepted", "documents"):
        values = d.get(key)
        if isinstance(values, list):
            return "\n".join(p for p in (_path_of(v) for v in values) if p)
    if "results" in d:
        paths = [_path_of(row) for r in d["results"] for row in r.get("rows", [])]
        return "\n".join(p for p in paths if p)
    if "path" in d:
        return str(d["path"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _path_of(item: Any) -> str:
    if isinstance(item, dict):
        for key in ("path", "source_path"):
            if item.get(key):
                return str(item[key])
    return ""


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="kb.ok"), Text(f"  {result.op}", style="kb.op"))


def _field(console: Console, key: str, value: Any) -> None:
    style = {"path": "kb.path", "title": "kb.title"}.get(key, "")
    console.print(Text.assemble((f"  {key}: ", "kb.key"), (_cell(value), style)))


def _section(console: Console, title: str, count: int) -> None:
    console.print()
    console.print(Text.assemble((f"{title} ", "kb.title"), (f"({count})", "kb.count")))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the telemetry span tree (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _render_span(console, value, indent=4)
        else:
            console.print(f"    {key}: {value}")


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    duration = span.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    line = f"{' ' * indent}[{style}]{duration:>8.2f}ms[/{style}]  {span.get('name', '?')}"
    notes = span.get("annotations") or {}
    if notes:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in notes.items()) + ")"
    console.print(line)
    for child in span.get("children", []):
        _render_span(console, child, indent + 4)


def _rows_table(rows: list[dict[str, Any]], fields: list[str]) -> Table:
    table = Table(show_header=True, pad_edge=False, expand=False)
    for name in fields:
        table.add_column(name, style="kb.path" if name == "path" else None)
    for row in rows:
        table.add_row(*(_cell(row.get(name)) for name in fields))
    return table


def _documents_table(items: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Path", style="kb.path", no_wrap=True)
    table.add_column("Title", style="kb.title")
    table.add_column("Kind")
    for item in items:
        kind = str(item.get("kind", ""))
        table.add_row(
            str(item.get("path", "")),
            str(item.get("title", "")),
            Text(kind, style=style_for_kind(kind)),
        )
    return table


def _links_table(items: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Source", style="kb.path")
    table.add_column("Line", justify="right")
    table.add_column("Target")
    table.add_column("Resolved to", style="kb.path")
    for item in items:
        target = item.get("target_path")
        table.add_row(
            str(item.get("source_path", "")),
            str(item.get("line", "")),
            str(item.get("target_name", "")),
            str(target) if target else Text("dangling", style="kb.warning"),
        )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="kb.error")
    console.print(label, Text(f"  {result.op}", style="kb.op"), Text(f" — {msg}"))
    if err is None:
        return
    for issue in err.detail.get("issues", []):
        message = escape(str(issue.get("message")))
        console.print(f"  [kb.error]{issue.get('kind')}[/kb.error] {message}")
    if verbose and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            console.print(Text(f"    {key}: {value}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    counts = d.get("counts", {})
    _status_line(console, result)
    for key in ("scanned", "accepted", "rejected", "links", "dangling", "directive_errors"):
        _field(console, key, counts.get(key, 0))

    rejected = d.get("rejected", [])
    if rejected:
        _section(console, "Rejected", len(rejected))
        for item in rejected:
            console.print(
                f"  [kb.path]{escape(item['path'])}[/kb.path] [dim]({item['stage']})[/dim] "
                f"{escape(item.get('message') or '')}"
            )
            for issue in item.get("issues", []):
                message = escape(issue["message"])
                console.print(f"    [kb.error]{issue['kind']}[/kb.error] {message}")

    dangling = d.get("dangling", [])
    if dangling:
        _section(console, "Dangling links", len(dangling))
        for w in dangling:
            console.print(
                f"  [kb.path]{escape(w['source_path'])}[/kb.path]:{w['line']} "
                f"-> [kb.warning]{escape(w['target_name'])}[/kb.warning]"
            )

    errors = d.get("directive_errors", [])
    if errors:
        _section(console, "Directive errors", len(errors))
        for e in errors:
            console.print(
                f"  [kb.path]{escape(str(e.get('source_path')))}[/kb.path]:{e.get('line')} "
                f"[kb.error]{e['kind']}[/kb.error] {escape(e['message'])}"
            )

    if verbose and d.get("accepted"):
        _section(console, "Accepted", len(d["accepted"]))
        console.print(_documents_table(d["accepted"]))


def _render_rows(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    rows = d.get("rows", [])
    fields = d.get("fields") or (list(rows[0]) if rows else ["path"])
    console.print(_rows_table(rows, fields))
    console.print(f"\n{d.get('count', len(rows))} of {d.get('total', len(rows))} documents")


def _render_run_document(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "path", d.get("path"))
    _field(console, "title", d.get("title"))
    for entry in d.get("results", []):
        console.print()
        console.print(Text(f"  directive at line {entry['line']}", style="kb.key"))
        if entry.get("error"):
            err = entry["error"]
            console.print(f"  [kb.error]{err['kind']}[/kb.error] {escape(err['message'])}")
            continue
        rows = entry.get("rows", [])
        fields = list(rows[0]) if rows else ["path"]
        console.print(_rows_table(rows, fields))
        console.print(f"  {entry['count']} of {entry['total']} documents")


def _render_links(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    if "path" in d:
        _field(console, "path", d["path"])
    items = d.get("items", [])
    if items:
        console.print(_links_table(items))
    console.print(f"\n{d.get('count', len(items))} links")


def _render_documents(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    items = d.get("items", [])
    console.print(_documents_table(items))
    console.print(f"\n{d.get('count', len(items))} documents")


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("path", "fields", "database", "documents", "links", "rejected"):
        if key in d:
            _field(console, key, d[key])


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "database", d.get("database"))
    _field(console, "saved_at", d.get("saved_at"))
    for key, value in d.get("counts", {}).items():
        _field(console, key, value)
    if verbose and d.get("documents"):
        console.print(_documents_table(d["documents"]))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "check": _render_check,
    "run_document": _render_run_document,
    "evaluate": _render_rows,
    "list": _render_rows,
    "links": _render_links,
    "backlinks": _render_links,
    "dangling": _render_links,
    "orphans": _render_documents,
    "update": _render_mutation,
    "save": _render_mutation,
    "show": _render_show,
}
