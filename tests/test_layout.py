import numpy as np
import pytest

from notegraph.model.builder import GraphBuilder
from notegraph.model.graph import EdgeKind, Graph, GraphEdge, GraphNode
from notegraph.model.layout import ForceLayoutEngine, LayoutSettings


def make_graph(points, edges=()):
    nodes = {str(i): GraphNode(id=str(i), title=str(i), x=x, y=y) for i, (x, y) in enumerate(points)}
    return Graph(nodes=nodes, explicit_edges=[GraphEdge(str(a), str(b)) for a, b in edges])


def test_kinetic_energy_decreases_on_small_connected_graph(chain_notes, rng):
    graph = GraphBuilder(rng=rng).build(chain_notes)
    engine = ForceLayoutEngine(graph)

    engine.step()
    energy_first = engine.kinetic_energy()
    assert energy_first > 0.0

    engine.run(499)
    assert engine.tick_count == 500
    assert engine.kinetic_energy() < energy_first
    assert np.all(np.isfinite(engine.positions))


def test_repulsion_pushes_pair_apart():
    settings = LayoutSettings(gravity=0.0)
    engine = ForceLayoutEngine(make_graph([(0.0, 0.0), (10.0, 0.0)]), settings)
    forces = engine.compute_forces(engine.positions)
    expected = 800.0 / 10.0 ** 2
    assert forces[0] == pytest.approx([-expected, 0.0])
    assert forces[1] == pytest.approx([expected, 0.0])


def test_spring_pulls_long_edge_together():
    settings = LayoutSettings(repulsion=0.0, gravity=0.0, rest_length=100.0, attraction=0.5)
    engine = ForceLayoutEngine(make_graph([(0.0, 0.0), (300.0, 0.0)], edges=[(0, 1)]), settings)
    forces = engine.compute_forces(engine.positions)
    assert forces[0] == pytest.approx([100.0, 0.0])
    assert forces[1] == pytest.approx([-100.0, 0.0])


def test_gravity_pulls_toward_center():
    settings = LayoutSettings(center_x=0.0, center_y=0.0, gravity=0.1)
    engine = ForceLayoutEngine(make_graph([(50.0, -20.0)]), settings)
    forces = engine.compute_forces(engine.positions)
    assert forces[0] == pytest.approx([-5.0, 2.0])


def test_integration_formula():
    settings = LayoutSettings(center_x=0.0, center_y=0.0, gravity=1.0, dt_factor=0.5, damping=0.5)
    engine = ForceLayoutEngine(make_graph([(10.0, 0.0)]), settings)
    engine.step()
    # F = -10; v = 0 + -10 * 0.5 = -5; p = 10 + -5 * 0.5 = 7.5; v *= 0.5
    assert engine.positions[0] == pytest.approx([7.5, 0.0])
    assert engine.velocities[0] == pytest.approx([-2.5, 0.0])


def test_coincident_nodes_stay_finite():
    engine = ForceLayoutEngine(make_graph([(5.0, 5.0), (5.0, 5.0), (5.0, 5.000001)], edges=[(0, 1)]))
    engine.run(50)
    assert np.all(np.isfinite(engine.positions))
    assert np.all(np.isfinite(engine.velocities))


def test_snapshot_is_read_only_and_replaced_each_tick():
    engine = ForceLayoutEngine(make_graph([(0.0, 0.0), (30.0, 0.0)], edges=[(0, 1)]))
    before = engine.snapshot()
    with pytest.raises(ValueError):
        before[0, 0] = 1.0
    copy = before.copy()
    engine.step()
    after = engine.snapshot()
    assert after is not before
    np.testing.assert_array_equal(before, copy)


def test_freeze_when_energy_below_threshold(chain_notes, rng):
    graph = GraphBuilder(rng=rng).build(chain_notes)
    engine = ForceLayoutEngine(graph, LayoutSettings(freeze_energy=1e-3))
    done = engine.run(5000)
    assert engine.frozen
    assert done < 5000
    positions = engine.snapshot()
    assert engine.step() is False
    assert engine.snapshot() is positions

    engine.wake()
    assert engine.step() is True


def test_tag_edges_optional_in_simulation():
    nodes = {k: GraphNode(id=k) for k in "ab"}
    graph = Graph(nodes=nodes, tag_edges=[GraphEdge("a", "b", EdgeKind.SHARED_TAG)])
    assert len(ForceLayoutEngine(graph).edge_index) == 1
    assert len(ForceLayoutEngine(graph, LayoutSettings(include_tag_edges=False)).edge_index) == 0


def test_sync_to_graph_and_empty_graph():
    graph = make_graph([(0.0, 0.0), (40.0, 0.0)], edges=[(0, 1)])
    engine = ForceLayoutEngine(graph)
    engine.run(3)
    engine.sync_to_graph()
    assert (graph.nodes["0"].x, graph.nodes["0"].y) == tuple(engine.positions[0])

    empty = ForceLayoutEngine(Graph())
    assert empty.step() is True
    assert empty.kinetic_energy() == 0.0


@pytest.mark.parametrize("kwargs", [
    {"damping": 0.0},
    {"damping": 1.5},
    {"min_distance": 0.0},
    {"dt_factor": -1.0},
    {"freeze_energy": -1.0},
])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        LayoutSettings(**kwargs)
