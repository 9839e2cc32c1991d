"""BaseService — foundation for all kbctl services.

Every service receives a :class:`KnowledgeBase` at construction time and
reads sources, schema and settings through it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kbctl.infrastructure.knowledge_base import KnowledgeBase


class BaseService:
    """Base for service-layer classes.

    Usage::

        class GraphService(BaseService):
            def backlinks(self, name: str) -> ServiceResult:
                outcome = IngestService(self._kb).build()
                ...
    """

    def __init__(self, kb: KnowledgeBase) -> None:
        self._kb = kb
