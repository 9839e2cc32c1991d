"""LinkResolver — builds the corpus link graph with NetworkX.

Resolution is a full pass over a corpus snapshot, never incremental: a
target can only be judged dangling with every identifier in view. The
result is a ``MultiDiGraph`` (repeated links between the same pair are
kept) whose nodes are exactly the corpus documents; backlinks are read
from in-edges rather than stored separately.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeAlias

import networkx as nx

from kbctl.domain.errors import DanglingLinkWarning
from kbctl.domain.links import Link

if TYPE_CHECKING:
    from kbctl.infrastructure.corpus import CorpusSnapshot

logger = logging.getLogger(__name__)

_Graph: TypeAlias = nx.MultiDiGraph


class LinkGraph:
    """Resolved links of one corpus snapshot."""

    def __init__(
        self,
        graph: _Graph,
        links: list[Link],
        dangling: list[DanglingLinkWarning],
        version: int = 0,
    ) -> None:
        self._graph = graph
        self._links = links
        self._dangling = dangling
        self.version = version

    @property
    def graph(self) -> _Graph:
        return self._graph

    @property
    def links(self) -> list[Link]:
        return list(self._links)

    @property
    def dangling(self) -> list[DanglingLinkWarning]:
        return list(self._dangling)

    def links_out(self, path: str) -> list[Link]:
        """All links written in *path*, resolved or not, in source order."""
        return [link for link in self._links if link.source_path == path]

    def links_in(self, path: str) -> list[Link]:
        """Backlinks: resolved links from other documents (or itself) to *path*."""
        if path not in self._graph:
            return []
        found = [
            Link(
                source_path=source,
                target_name=data["target_name"],
                resolved=True,
                target_path=path,
                line=data["line"],
            )
            for source, _, data in self._graph.in_edges(path, data=True)
        ]
        return sorted(found, key=lambda lnk: (lnk.source_path, lnk.line))

    def orphans(self) -> list[str]:
        """Documents with no resolved links in either direction."""
        return sorted(node for node in self._graph if self._graph.degree(node) == 0)

    def stats(self) -> dict[str, Any]:
        return {
            "nodes": self._graph.number_of_nodes(),
            "edges": self._graph.number_of_edges(),
            "dangling": len(self._dangling),
        }


class LinkResolver:
    """Resolves wikilink targets to corpus documents.

    Matching is exact and case-sensitive against each document's
    identifiers (file stem, path without ``.md``, full path). There is no
    fuzzy matching.
    """

    def resolve(self, snapshot: CorpusSnapshot) -> LinkGraph:
        documents = snapshot.all()
        lookup: dict[str, str] = {}
        for doc in documents:
            for identifier in doc.identifiers():
                lookup.setdefault(identifier, doc.path)

        g: _Graph = nx.MultiDiGraph()
        for doc in documents:
            g.add_node(doc.path, title=doc.title, kind=str(doc.kind))

        links: list[Link] = []
        dangling: list[DanglingLinkWarning] = []
        for doc in documents:
            for ref in doc.links_out:
                target_path = lookup.get(ref.target)
                if target_path is None:
                    links.append(
                        Link(
                            source_path=doc.path,
                            target_name=ref.target,
                            resolved=False,
                            line=ref.line,
                        )
                    )
                    dangling.append(
                        DanglingLinkWarning(
                            source_path=doc.path,
                            target_name=ref.target,
                            line=ref.line,
                        )
                    )
                    logger.debug("Dangling link %s -> %s", doc.path, ref.target)
                    continue
                links.append(
                    Link(
                        source_path=doc.path,
                        target_name=ref.target,
                        resolved=True,
                        target_path=target_path,
                        line=ref.line,
                    )
                )
                g.add_edge(doc.path, target_path, target_name=ref.target, line=ref.line)

        return LinkGraph(g, links, dangling, version=snapshot.version)
