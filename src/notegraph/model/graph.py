"""
Graph Data Model
================
Nodes, edges and the Graph container produced from a note set.

A Graph is rebuilt wholesale every time the view fetches notes; nothing here
mutates topology after construction. Only node positions/velocities change,
and only through the layout engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class EdgeKind(str, Enum):
    """Relationship type of an edge."""
    EXPLICIT_LINK = "explicit-link"
    SHARED_TAG = "shared-tag"

    def __str__(self) -> str:
        return self.value


EdgeKey = tuple[str, str, EdgeKind]


def canonical_key(a: str, b: str, kind: EdgeKind) -> EdgeKey:
    """Order-independent identity of an edge: (min(id), max(id), kind)."""
    return (a, b, kind) if a <= b else (b, a, kind)


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    kind: EdgeKind = EdgeKind.EXPLICIT_LINK

    @property
    def key(self) -> EdgeKey:
        return canonical_key(self.source, self.target, self.kind)

    @property
    def pair(self) -> tuple[str, str]:
        """Unordered endpoint pair, ignoring kind."""
        a, b, _ = self.key
        return a, b


@dataclass
class GraphNode:
    """Visual representation of one note."""
    id: str
    title: str = ""
    tags: tuple[str, ...] = ()
    favorite: bool = False
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, pos=({self.x:.1f}, {self.y:.1f}))"

    @property
    def label(self) -> str:
        return self.title or self.id


@dataclass
class Graph:
    """
    Node set keyed by id plus the two edge lists.

    Shared-tag edges are kept separate so the view can toggle them
    independently of explicit links.
    """
    nodes: dict[str, GraphNode] = field(default_factory=dict)
    explicit_edges: list[GraphEdge] = field(default_factory=list)
    tag_edges: list[GraphEdge] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._index: dict[str, int] = {node_id: i for i, node_id in enumerate(self.nodes)}

    @property
    def node_ids(self) -> list[str]:
        return list(self.nodes)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self, include_tag_edges: bool = True) -> int:
        n = len(self.explicit_edges)
        if include_tag_edges:
            n += len(self.tag_edges)
        return n

    @property
    def is_empty(self) -> bool:
        """True when there is nothing worth drawing: no notes or no edges."""
        return not self.nodes or self.edge_count() == 0

    def edges(self, include_tag_edges: bool = True) -> Iterator[GraphEdge]:
        yield from self.explicit_edges
        if include_tag_edges:
            yield from self.tag_edges

    def edge_keys(self) -> set[EdgeKey]:
        return {edge.key for edge in self.edges()}

    def index_of(self, node_id: str) -> int:
        """Row of the node in position/velocity arrays (insertion order)."""
        return self._index[node_id]

    def positions(self) -> list[tuple[float, float]]:
        return [(node.x, node.y) for node in self.nodes.values()]
