from notegraph.model.builder import build_graph
from notegraph.model.graph import EdgeKind, Graph, GraphEdge, GraphNode
from notegraph.model.links import directed_links
from notegraph.model.notes import Note
from notegraph.model.stats import degree_map, link_stats


def make_graph(ids, explicit=(), tagged=()):
    return Graph(
        nodes={i: GraphNode(id=i) for i in ids},
        explicit_edges=[GraphEdge(a, b) for a, b in explicit],
        tag_edges=[GraphEdge(a, b, EdgeKind.SHARED_TAG) for a, b in tagged],
    )


def linking(note_id, *targets, tags=()):
    body = " ".join(f"[[{t}]]" for t in targets)
    return Note(id=note_id, title=note_id.upper(), body=body, tags=tags)


def stats_for(notes, rng):
    return link_stats(build_graph(notes, rng=rng), notes)


def test_degree_map_counts_both_endpoints():
    graph = make_graph("abcd", explicit=[("a", "b"), ("a", "c")], tagged=[("c", "d")])
    assert degree_map(graph) == {"a": 2, "b": 1, "c": 2, "d": 1}
    assert degree_map(graph, include_tag_edges=False) == {"a": 2, "b": 1, "c": 1, "d": 0}


def test_directed_links_keep_both_directions():
    notes = [linking("a", "B", "b", "A", "Nowhere"), linking("b", "A")]
    assert directed_links(notes) == [("a", "b"), ("b", "a")]


def test_orphans_and_leaves(rng):
    notes = [linking("a", "B"), linking("b"), linking("c", tags=("t",)), linking("d", tags=("t",))]
    stats = stats_for(notes, rng)
    assert stats.outgoing["a"] == 1
    assert stats.incoming["b"] == 1
    assert stats.leaves == ["b"]
    # shared tags do not rescue a note from being an orphan
    assert stats.orphans == ["c", "d"]


def test_mutual_links_are_not_leaves(rng):
    stats = stats_for([linking("a", "B"), linking("b", "A")], rng)
    assert stats.outgoing == {"a": 1, "b": 1}
    assert stats.incoming == {"a": 1, "b": 1}
    assert stats.leaves == []
    assert stats.orphans == []


def test_hub_found_when_spokes_link_back_first(rng):
    spokes = [linking(f"n{i}", "H") for i in range(3)]
    notes = spokes + [linking("h", "N0", "N1", "N2")]
    stats = stats_for(notes, rng)
    assert stats.outgoing["h"] == 3
    assert stats.incoming["h"] == 3
    assert stats.hubs == ["h"]


def test_hubs_sorted_by_outgoing_links(rng):
    targets = [f"t{i}" for i in range(5)]
    notes = (
        [linking("h1", *(t.upper() for t in targets[:3])), linking("h2", *(t.upper() for t in targets))]
        + [linking("x", "T0")]
        + [linking(t) for t in targets]
    )
    assert stats_for(notes, rng).hubs == ["h2", "h1"]


def test_hubs_capped(rng):
    hubs = [linking(f"h{i:02d}", "T0", "T1", "T2") for i in range(12)]
    notes = hubs + [linking(f"t{j}") for j in range(3)]
    assert stats_for(notes, rng).hubs == [f"h{i:02d}" for i in range(10)]
