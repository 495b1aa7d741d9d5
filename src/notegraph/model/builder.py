"""
Graph Builder
=============
Validates edge candidates against the note set and seeds node positions.

Why is this file needed?
------------------------
1. Integrity: candidates come from free text. The builder enforces the edge
   invariants (known endpoints, no self-edges, one edge per unordered pair and
   kind, explicit links suppress shared-tag edges) with a canonical-key set.
2. Numerics: the layout engine divides by squared distances, so no two nodes
   may start at the same point. Nodes are placed on a circle and jittered.

Classes:
    SeedSettings: Parameters of the initial circular placement.
    GraphBuilder: Produces a Graph from notes (+ optional candidates).
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from notegraph.model.graph import EdgeKey, EdgeKind, Graph, GraphEdge, GraphNode
from notegraph.model.links import EdgeCandidates, LinkExtractor
from notegraph.model.notes import Note

logger = logging.getLogger(__name__)


@dataclass
class SeedSettings:
    center_x: float = 500.0
    center_y: float = 350.0
    base_radius: float = 125.0      # radius for a single node
    radius_per_node: float = 2.5    # growth of the circle with node count
    jitter: float = 40.0            # +- uniform perturbation per axis
    vertical_jitter: float = 10.0   # extra +- offset on y only

    def __post_init__(self) -> None:
        if self.base_radius <= 0.0:
            raise ValueError("base_radius must be positive.")
        if self.radius_per_node < 0.0 or self.jitter < 0.0 or self.vertical_jitter < 0.0:
            raise ValueError("radius_per_node and jitter values must be non-negative.")


class GraphBuilder:
    def __init__(
        self,
        settings: SeedSettings | None = None,
        rng: np.random.Generator | None = None,
        extractor: LinkExtractor | None = None,
    ) -> None:
        self.settings = settings or SeedSettings()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.extractor = extractor or LinkExtractor()

    def build(self, notes: Sequence[Note], candidates: EdgeCandidates | None = None) -> Graph:
        """
        Build the canonical Graph.

        Args:
            notes: Ordered note list. Node order follows it; duplicate ids keep
                the first record.
            candidates: Pre-extracted edges. Extracted from ``notes`` if None.
        """
        if candidates is None:
            candidates = self.extractor.extract(notes)

        nodes: dict[str, GraphNode] = {}
        for note in notes:
            if note.id in nodes:
                logger.warning(f"Duplicate note id {note.id!r}, keeping the first record.")
                continue
            nodes[note.id] = GraphNode(
                id=note.id,
                title=note.title,
                tags=tuple(note.tags),
                favorite=note.favorite,
            )

        explicit = self._validate(candidates.explicit, nodes, EdgeKind.EXPLICIT_LINK)
        explicit_pairs = {edge.pair for edge in explicit}
        shared = [
            edge for edge in self._validate(candidates.shared_tag, nodes, EdgeKind.SHARED_TAG)
            if edge.pair not in explicit_pairs
        ]

        graph = Graph(nodes=nodes, explicit_edges=explicit, tag_edges=shared)
        self.seed_positions(graph)

        logger.info(
            f"Built graph: {graph.node_count} nodes, {len(explicit)} links, {len(shared)} tag links."
        )
        return graph

    @staticmethod
    def _validate(edges: Sequence[GraphEdge], nodes: dict[str, GraphNode], kind: EdgeKind) -> list[GraphEdge]:
        seen: set[EdgeKey] = set()
        valid: list[GraphEdge] = []
        dropped = 0
        for edge in edges:
            if edge.source == edge.target or edge.source not in nodes or edge.target not in nodes:
                dropped += 1
                continue
            # candidates of the wrong list are re-labelled with the list's kind
            if edge.kind is not kind:
                edge = GraphEdge(edge.source, edge.target, kind)
            if edge.key in seen:
                dropped += 1
                continue
            seen.add(edge.key)
            valid.append(edge)
        if dropped:
            logger.debug(f"Dropped {dropped} invalid or duplicate {kind} candidates.")
        return valid

    def seed_positions(self, graph: Graph) -> None:
        """
        Place nodes evenly on a circle, then jitter them.

        The radius grows linearly with the node count so that the average arc
        between neighbours stays roughly constant.
        """
        s = self.settings
        n = graph.node_count
        if n == 0:
            return

        radius = s.base_radius + s.radius_per_node * n
        angles = 2.0 * math.pi * np.arange(n) / n
        jitter = self.rng.uniform(-s.jitter, s.jitter, size=(n, 2)) if s.jitter > 0 else np.zeros((n, 2))
        lift = (
            self.rng.uniform(-s.vertical_jitter, s.vertical_jitter, size=n)
            if s.vertical_jitter > 0 else np.zeros(n)
        )

        xs = s.center_x + radius * np.cos(angles) + jitter[:, 0]
        ys = s.center_y + radius * np.sin(angles) + jitter[:, 1] + lift

        for i, node in enumerate(graph.nodes.values()):
            node.x = float(xs[i])
            node.y = float(ys[i])
            node.vx = 0.0
            node.vy = 0.0


def build_graph(
    notes: Sequence[Note],
    settings: SeedSettings | None = None,
    rng: np.random.Generator | None = None,
) -> Graph:
    """Extract edges from ``notes`` and build the seeded Graph in one call."""
    return GraphBuilder(settings=settings, rng=rng).build(notes)
