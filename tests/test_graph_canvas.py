import time

import numpy as np
import pytest
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QMouseEvent

from notegraph.model.builder import build_graph
from notegraph.model.layout import ForceLayoutEngine
from notegraph.model.stats import link_stats
from notegraph.view.graph_canvas import GraphCanvas, truncate_label


def mouse_event(kind, x, y, button=Qt.NoButton):
    buttons = button if kind != QEvent.MouseButtonRelease else Qt.NoButton
    point = QPointF(x, y)
    return QMouseEvent(kind, point, point, button, buttons, Qt.NoModifier)


@pytest.fixture
def canvas(qapp, tagged_notes, rng):
    widget = GraphCanvas()
    widget.resize(800, 600)
    graph = build_graph(tagged_notes, rng=rng)
    widget.set_engine(graph, ForceLayoutEngine(graph))
    yield widget
    widget.detach()
    widget.deleteLater()


def test_truncate_label():
    assert truncate_label("short") == "short"
    assert truncate_label("a" * 30) == "a" * 18 + "..."


def test_hover_over_node_emits_change(canvas):
    hovered = []
    canvas.hovered_changed.connect(hovered.append)
    x, y = canvas.screen_positions()[0]

    canvas.mouseMoveEvent(mouse_event(QEvent.MouseMove, x + 2, y + 2))
    assert canvas.controller.hovered == "1"
    assert hovered == ["1"]

    canvas.mouseMoveEvent(mouse_event(QEvent.MouseMove, x + 200, y + 200))
    assert canvas.controller.hovered is None
    assert hovered == ["1", None]


def test_click_on_node_activates(canvas):
    activated = []
    canvas.node_activated.connect(activated.append)
    x, y = canvas.screen_positions()[1]

    canvas.mousePressEvent(mouse_event(QEvent.MouseButtonPress, x, y, Qt.LeftButton))
    assert activated == ["2"]
    assert not canvas.controller.is_dragging


def test_drag_on_background_pans(canvas):
    canvas.mousePressEvent(mouse_event(QEvent.MouseButtonPress, 2, 2, Qt.LeftButton))
    assert canvas.controller.is_dragging
    canvas.mouseMoveEvent(mouse_event(QEvent.MouseMove, 32, 12))
    assert canvas.camera.pan == (30.0, 10.0)
    canvas.mouseReleaseEvent(mouse_event(QEvent.MouseButtonRelease, 32, 12, Qt.LeftButton))
    assert not canvas.controller.is_dragging


def test_right_button_is_ignored(canvas):
    canvas.mousePressEvent(mouse_event(QEvent.MouseButtonPress, 2, 2, Qt.RightButton))
    assert not canvas.controller.is_dragging


def test_zoom_buttons_and_reset(canvas):
    canvas.zoom_in()
    assert canvas.camera.zoom == pytest.approx(1.2)
    canvas.reset_view()
    assert canvas.camera.zoom == 1.0


def test_rendering_timer_and_paint(canvas):
    canvas.set_show_tag_edges(True)
    canvas.set_always_show_labels(True)
    canvas.start_rendering()
    assert canvas.is_rendering
    # drawing into a pixmap runs paintEvent
    assert not canvas.grab().isNull()
    canvas.stop_rendering()
    assert not canvas.is_rendering


def test_detach_forgets_engine(canvas):
    canvas.start_rendering()
    canvas.detach()
    assert canvas.engine is None
    assert not canvas.is_rendering
    assert len(canvas.screen_positions()) == 0
    # input without an engine is a no-op
    canvas.mouseMoveEvent(mouse_event(QEvent.MouseMove, 10, 10))
    assert canvas.controller.hovered is None


def wait_for_size(qapp, widget, width, height, timeout=2.0):
    deadline = time.monotonic() + timeout
    while (widget.camera.width, widget.camera.height) != (width, height) and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)


def test_camera_tracks_widget_size(qapp, canvas):
    canvas.show()
    wait_for_size(qapp, canvas, 800, 600)
    assert (canvas.camera.width, canvas.camera.height) == (800, 600)
    before = canvas.screen_positions()

    canvas.resize(900, 500)
    wait_for_size(qapp, canvas, 900, 500)
    assert (canvas.camera.width, canvas.camera.height) == (900, 500)

    # the scene stays centred: every node shifts by half the size change
    shift = canvas.screen_positions() - before
    np.testing.assert_allclose(shift, np.tile([50.0, -50.0], (len(shift), 1)))
    canvas.hide()


def test_stats_shown_for_hovered_node(qapp, tagged_notes, rng):
    widget = GraphCanvas()
    graph = build_graph(tagged_notes, rng=rng)
    widget.set_engine(graph, ForceLayoutEngine(graph), stats=link_stats(graph, tagged_notes))
    x, y = widget.screen_positions()[1]
    widget.mouseMoveEvent(mouse_event(QEvent.MouseMove, x, y))
    assert widget.hover_lines() == ["Beta", "1 connections", "1 in • 0 out"]
    assert widget.overlay_line() == "3 notes • 1 connections • 1 orphans"
    assert not widget.grab().isNull()

    widget.detach()
    assert widget.hover_lines() == []
    widget.deleteLater()
