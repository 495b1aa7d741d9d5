import time

import numpy as np
import pytest

from notegraph.controller.session import GraphSession, SessionState
from notegraph.model.errors import NoteFetchError
from notegraph.model.layout import LayoutSettings
from notegraph.model.notes import Note, StaticNoteSource
from notegraph.view.graph_view import PAGE_EMPTY, PAGE_ERROR, PAGE_GRAPH, GraphView


class FailingSource:
    def fetch_notes(self):
        raise NoteFetchError("storage unavailable")


def wait_while_loading(qapp, target, timeout=5.0):
    deadline = time.monotonic() + timeout
    while target.state is SessionState.LOADING and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)
    qapp.processEvents()


@pytest.fixture
def make_session(qapp):
    sessions = []

    def factory(source, **kwargs):
        session = GraphSession(source, rng=np.random.default_rng(0), **kwargs)
        sessions.append(session)
        return session

    yield factory
    for session in sessions:
        session.stop()


def test_loaded_graph_starts_simulation(qapp, make_session, tagged_notes):
    session = make_session(StaticNoteSource(tagged_notes))
    ready = []
    session.graph_ready.connect(lambda graph, engine: ready.append(graph))

    session.start()
    assert session.state is SessionState.LOADING
    wait_while_loading(qapp, session)

    assert session.state is SessionState.RUNNING
    assert session.is_simulating
    assert ready == [session.graph]
    assert session.graph.node_count == 3
    assert session.stats.orphans == ["3"]
    assert session.stats.leaves == ["2"]
    assert [b.id for b in session.backlinks("2")] == ["1"]

    ticks = session.engine.tick_count
    session._on_tick()
    assert session.engine.tick_count == ticks + 1

    session.stop()
    assert session.state is SessionState.STOPPED
    assert not session.is_simulating
    assert session.engine is None


def test_start_twice_is_rejected(qapp, make_session, tagged_notes):
    session = make_session(StaticNoteSource(tagged_notes))
    session.start()
    with pytest.raises(RuntimeError):
        session.start()
    wait_while_loading(qapp, session)


def test_fetch_failure(qapp, make_session):
    session = make_session(FailingSource())
    failures = []
    session.failed.connect(failures.append)

    session.start()
    wait_while_loading(qapp, session)

    assert session.state is SessionState.FAILED
    assert failures == ["storage unavailable"]
    assert session.engine is None
    assert not session.is_simulating


@pytest.mark.parametrize("notes", [
    [],
    [Note(id="a", title="A"), Note(id="b", title="B")],
])
def test_empty_graph(qapp, make_session, notes):
    session = make_session(StaticNoteSource(notes))
    session.start()
    wait_while_loading(qapp, session)
    assert session.state is SessionState.EMPTY
    assert not session.is_simulating


def test_settled_layout_stops_ticking(qapp, make_session, tagged_notes):
    session = make_session(StaticNoteSource(tagged_notes), layout_settings=LayoutSettings(freeze_energy=1e9))
    settled = []
    session.settled.connect(lambda: settled.append(True))
    session.start()
    wait_while_loading(qapp, session)

    session._on_tick()
    assert settled
    assert not session.is_simulating


def test_stop_during_load_drops_result(qapp, make_session, tagged_notes):
    session = make_session(StaticNoteSource(tagged_notes))
    session.start()
    worker = session.worker
    session.stop()
    worker.wait(5000)
    qapp.processEvents()

    assert session.state is SessionState.STOPPED
    assert session.engine is None
    assert not session.is_simulating


def test_graph_view_pages(qapp, tagged_notes):
    view = GraphView(StaticNoteSource(tagged_notes))
    view.start()
    wait_while_loading(qapp, view)
    assert view.current_page == PAGE_GRAPH
    assert view.canvas.is_rendering
    assert view.btn_zoom_in.isEnabled()
    assert view.canvas.overlay_line().endswith("1 orphans")

    view.stop()
    assert not view.canvas.is_rendering
    assert not view.session.is_simulating
    assert view.canvas.engine is None
    assert view.state is SessionState.STOPPED
    assert not view.btn_zoom_in.isEnabled()


def test_graph_view_error_and_empty_pages(qapp):
    failing = GraphView(FailingSource())
    failing.start()
    wait_while_loading(qapp, failing)
    assert failing.current_page == PAGE_ERROR
    assert "storage unavailable" in failing.lbl_error.text()

    empty = GraphView(StaticNoteSource([]))
    empty.start()
    wait_while_loading(qapp, empty)
    assert empty.current_page == PAGE_EMPTY
    assert "No notes yet" in empty.lbl_empty.text()

    failing.stop()
    empty.stop()
