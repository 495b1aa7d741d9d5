"""
Graph statistics: degree, orphans, leaves and hubs.

Directional counts (incoming/outgoing) are taken from the notes' own links,
since graph edges collapse A->B and B->A into one. Shared-tag edges only
contribute to ``degree`` when requested.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from notegraph.model.graph import Graph
from notegraph.model.links import directed_links
from notegraph.model.notes import Note

HUB_MIN_OUTGOING = 3
HUB_LIMIT = 10


@dataclass
class LinkStats:
    incoming: Counter = field(default_factory=Counter)
    outgoing: Counter = field(default_factory=Counter)
    orphans: list[str] = field(default_factory=list)
    leaves: list[str] = field(default_factory=list)
    hubs: list[str] = field(default_factory=list)


def degree_map(graph: Graph, include_tag_edges: bool = True) -> dict[str, int]:
    """Number of edges touching each node (all nodes present, zero included)."""
    degrees = {node_id: 0 for node_id in graph.nodes}
    for edge in graph.edges(include_tag_edges=include_tag_edges):
        degrees[edge.source] += 1
        degrees[edge.target] += 1
    return degrees


def link_stats(graph: Graph, notes: Sequence[Note]) -> LinkStats:
    """
    Classify the graph's notes by their explicit links.

    orphans: no incoming and no outgoing link.
    leaves: incoming links only.
    hubs: at least HUB_MIN_OUTGOING outgoing links, most first, at most HUB_LIMIT.

    Each distinct (source, target) link counts once, whatever the number of
    markers.
    """
    stats = LinkStats()
    for source, target in directed_links(notes):
        if source not in graph.nodes or target not in graph.nodes:
            continue
        stats.outgoing[source] += 1
        stats.incoming[target] += 1

    for node_id in graph.nodes:
        n_in = stats.incoming[node_id]
        n_out = stats.outgoing[node_id]
        if n_in == 0 and n_out == 0:
            stats.orphans.append(node_id)
        elif n_out == 0:
            stats.leaves.append(node_id)

    rank = {node_id: i for i, node_id in enumerate(graph.nodes)}
    hubs = [node_id for node_id in graph.nodes if stats.outgoing[node_id] >= HUB_MIN_OUTGOING]
    hubs.sort(key=lambda node_id: (-stats.outgoing[node_id], rank[node_id]))
    stats.hubs = hubs[:HUB_LIMIT]
    return stats
