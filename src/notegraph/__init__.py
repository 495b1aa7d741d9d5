"""
notegraph
=========
Knowledge-graph engine for a personal note-taking tool: link extraction,
graph building, force-directed layout and an interactive Qt canvas.

The model layer is usable without Qt. Besides the graph itself it offers
``find_backlinks`` (who links to a note, with a context snippet) and
``link_stats`` (incoming/outgoing counts, orphans, leaves, hubs); the canvas
shows the stats in its overlays and the main window reports backlinks when a
node is opened.
"""
from notegraph.model.builder import GraphBuilder, SeedSettings, build_graph
from notegraph.model.errors import NoteFetchError, NotegraphError
from notegraph.model.graph import EdgeKind, Graph, GraphEdge, GraphNode
from notegraph.model.layout import ForceLayoutEngine, LayoutSettings
from notegraph.model.links import Backlink, LinkExtractor, directed_links, find_backlinks
from notegraph.model.notes import JsonNoteSource, Note, NoteSource, StaticNoteSource
from notegraph.model.stats import LinkStats, degree_map, link_stats

__all__ = [
    "Backlink",
    "EdgeKind",
    "ForceLayoutEngine",
    "Graph",
    "GraphBuilder",
    "GraphEdge",
    "GraphNode",
    "JsonNoteSource",
    "LayoutSettings",
    "LinkExtractor",
    "LinkStats",
    "Note",
    "NoteFetchError",
    "NoteSource",
    "NotegraphError",
    "SeedSettings",
    "StaticNoteSource",
    "build_graph",
    "degree_map",
    "directed_links",
    "find_backlinks",
    "link_stats",
]
