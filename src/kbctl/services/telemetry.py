"""Span timing for service calls: ``@traced`` and ``trace_span``.

Disabled by default; the check on every call is one ContextVar lookup.
``--verbose`` enables it, and each traced service method then returns its
span tree under ``ServiceResult.meta["telemetry"]``.

Spans do not cross thread boundaries: work done inside the ingest worker
pool is timed as a whole by the enclosing span.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from kbctl.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("kbctl_telemetry_enabled", default=False)
_active: ContextVar[Span | None] = ContextVar("kbctl_active_span", default=None)

log = structlog.get_logger("kbctl.telemetry")


@dataclass
class Span:
    """One timed section, with nested child sections."""

    name: str
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def end(self) -> None:
        self.finished = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Time a block as a child of the active span.

    Yields None when telemetry is off or no traced call is active.
    """
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name)
    parent.children.append(child)
    token = _active.set(child)
    try:
        yield child
    finally:
        child.end()
        _active.reset(token)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Time a service method and attach its span tree to the returned ServiceResult."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        token = _active.set(span)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = True
        finally:
            span.end()
            _active.reset(token)
            log.debug(
                "span.complete",
                span_name=span.name,
                duration_ms=round(span.duration_ms, 2),
                ok=ok,
                children=len(span.children),
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            result = result.model_copy(update={"meta": meta})  # type: ignore[assignment]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on for the current context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The active span, for annotating from inside a traced call."""
    return _active.get() if _enabled.get() else None
