"""
Graph Canvas
============
QPainter widget that draws the laid-out graph and handles pointer input.

Why is this file needed?
------------------------
1. Rendering: A frame timer repaints the widget from the layout engine's most
   recently published position snapshot. The canvas never advances the
   simulation itself.
2. Interaction: Mouse, wheel, leave and resize events are forwarded to the
   ``InteractionController`` / ``Camera`` pair; activating a node emits
   ``node_activated`` for the host to navigate to the note.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import numpy as np
from PySide6.QtCore import QPointF, QLineF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QBrush, QColor, QFont, QFontMetrics, QPainter, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from notegraph.model.stats import degree_map
from notegraph.view.camera import Camera, CameraSettings
from notegraph.view.interaction import InteractionController

if TYPE_CHECKING:
    import numpy.typing as npt
    from notegraph.model.graph import Graph
    from notegraph.model.layout import ForceLayoutEngine
    from notegraph.model.stats import LinkStats

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16
NODE_RADIUS = 6.0
NODE_RADIUS_ACTIVE = 8.0
LABEL_MAX_CHARS = 18

BACKGROUND_COLOR = QColor("#0d0d0f")
NODE_COLOR = QColor("#6b6b73")
NODE_FAVORITE_COLOR = QColor("#fbbf24")
NODE_ACTIVE_COLOR = QColor("#8b5cf6")
LINK_COLOR = QColor(81, 49, 128, 160)        # #513180, ~0.6 opacity
TAG_LINK_COLOR = QColor(139, 92, 246, 50)    # faint violet, ~0.2 opacity
LABEL_COLOR = QColor("#a0a0a8")
OVERLAY_BG_COLOR = QColor(24, 24, 27, 220)
OVERLAY_TEXT_COLOR = QColor("#a1a1aa")


def truncate_label(title: str, limit: int = LABEL_MAX_CHARS) -> str:
    return title if len(title) <= limit else title[:limit] + "..."


class GraphCanvas(QWidget):
    node_activated = Signal(str)
    hovered_changed = Signal(object)  # node id or None

    def __init__(self, camera_settings: CameraSettings | None = None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(200, 150)
        self.setCursor(Qt.OpenHandCursor)

        self.camera = Camera(camera_settings, viewport=(self.width(), self.height()))
        self.controller = InteractionController(self.camera)

        self._graph: Graph | None = None
        self._engine: ForceLayoutEngine | None = None
        self._stats: LinkStats | None = None
        self._degrees: dict[str, int] = {}
        self._explicit_index = np.zeros((0, 2), dtype=np.int64)
        self._tag_index = np.zeros((0, 2), dtype=np.int64)

        self._show_tag_edges: bool = False
        self._always_show_labels: bool = False

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self.update)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def engine(self) -> Optional[ForceLayoutEngine]:
        return self._engine

    @property
    def is_rendering(self) -> bool:
        return self._frame_timer.isActive()

    def set_engine(self, graph: Graph, engine: ForceLayoutEngine, stats: LinkStats | None = None) -> None:
        """Attach a freshly built graph, its layout engine and optional link stats."""
        self._graph = graph
        self._engine = engine
        self._stats = stats
        self._degrees = degree_map(graph, include_tag_edges=self._show_tag_edges)
        self._explicit_index = self._edge_index(graph.explicit_edges)
        self._tag_index = self._edge_index(graph.tag_edges)
        self.camera.center_x = engine.settings.center_x
        self.camera.center_y = engine.settings.center_y
        self.camera.reset()
        self.controller.pointer_leave()
        self.controller.selected = None
        self.update()

    def start_rendering(self) -> None:
        if not self._frame_timer.isActive():
            self._frame_timer.start()

    def stop_rendering(self) -> None:
        self._frame_timer.stop()

    def detach(self) -> None:
        """Stop drawing and forget the engine (view unmounted)."""
        self.stop_rendering()
        self.controller.pointer_leave()
        self._engine = None
        self._graph = None
        self._stats = None
        self._degrees = {}
        self._explicit_index = np.zeros((0, 2), dtype=np.int64)
        self._tag_index = np.zeros((0, 2), dtype=np.int64)

    def set_show_tag_edges(self, show: bool) -> None:
        self._show_tag_edges = bool(show)
        if self._graph is not None:
            self._degrees = degree_map(self._graph, include_tag_edges=self._show_tag_edges)
        self.update()

    def set_always_show_labels(self, show: bool) -> None:
        self._always_show_labels = bool(show)
        self.update()

    def zoom_in(self) -> None:
        self.controller.zoom_in()
        self.update()

    def zoom_out(self) -> None:
        self.controller.zoom_out()
        self.update()

    def reset_view(self) -> None:
        self.controller.reset_view()
        self.update()

    def overlay_line(self) -> str:
        """Summary shown in the top-left corner."""
        graph = self._graph
        if graph is None:
            return ""
        n_links = graph.edge_count(include_tag_edges=self._show_tag_edges)
        line = f"{graph.node_count} notes • {n_links} connections"
        if self._stats is not None:
            line += f" • {len(self._stats.orphans)} orphans"
        return line

    def hover_lines(self) -> list[str]:
        """Info box for the hovered node: title, connections, link direction."""
        graph = self._graph
        hovered = self.controller.hovered
        if graph is None or hovered is None or hovered not in graph.nodes:
            return []
        lines = [graph.nodes[hovered].label, f"{self._degrees.get(hovered, 0)} connections"]
        if self._stats is not None:
            lines.append(f"{self._stats.incoming[hovered]} in • {self._stats.outgoing[hovered]} out")
        return lines

    def screen_positions(self) -> npt.NDArray[np.float64]:
        """(N, 2) screen coordinates of the current snapshot."""
        if self._engine is None:
            return np.zeros((0, 2), dtype=np.float64)
        return self._to_screen(self._engine.snapshot())

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event) -> None:
        self.camera.resize(event.size().width(), event.size().height())
        super().resizeEvent(event)

    def mouseMoveEvent(self, event) -> None:
        if self._engine is None:
            return
        pos = event.position()
        changed = self.controller.pointer_move(pos.x(), pos.y(), self._engine.snapshot(), self._engine.node_ids)
        if changed:
            self.hovered_changed.emit(self.controller.hovered)
        self._update_cursor()
        self.update()

    def mousePressEvent(self, event) -> None:
        if self._engine is None or event.button() != Qt.LeftButton:
            return
        pos = event.position()
        activated = self.controller.pointer_down(pos.x(), pos.y(), self._engine.snapshot(), self._engine.node_ids)
        self._update_cursor()
        if activated is not None:
            self.node_activated.emit(activated)
        self.update()

    def mouseReleaseEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.controller.pointer_up()
            self._update_cursor()

    def leaveEvent(self, event) -> None:
        if self.controller.pointer_leave():
            self.hovered_changed.emit(None)
        self._update_cursor()
        self.update()
        super().leaveEvent(event)

    def wheelEvent(self, event) -> None:
        self.controller.wheel(event.angleDelta().y())
        event.accept()
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            painter.fillRect(self.rect(), BACKGROUND_COLOR)
            if self._engine is None or self._graph is None:
                return

            # one snapshot per frame; the simulation may publish a newer one meanwhile
            screen = self._to_screen(self._engine.snapshot())
            self._draw_edges(painter, screen)
            self._draw_nodes(painter, screen)
            self._draw_labels(painter, screen)
            self._draw_overlay(painter)
        finally:
            painter.end()

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _to_screen(self, positions: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        cam = self.camera
        out = np.empty_like(positions, dtype=np.float64)
        out[:, 0] = (positions[:, 0] - cam.center_x) * cam.zoom + cam.pan_x + cam.width / 2
        out[:, 1] = (positions[:, 1] - cam.center_y) * cam.zoom + cam.pan_y + cam.height / 2
        return out

    def _update_cursor(self) -> None:
        if self.controller.is_dragging:
            self.setCursor(Qt.ClosedHandCursor)
        elif self.controller.hovered is not None:
            self.setCursor(Qt.PointingHandCursor)
        else:
            self.setCursor(Qt.OpenHandCursor)

    def _active_ids(self) -> set[str]:
        return {i for i in (self.controller.hovered, self.controller.selected) if i is not None}

    # ---- drawing ----

    def _edge_index(self, edges) -> npt.NDArray[np.int64]:
        graph = self._graph
        pairs = [(graph.index_of(e.source), graph.index_of(e.target)) for e in edges]
        return np.array(pairs, dtype=np.int64).reshape(-1, 2)

    def _draw_edges(self, painter: QPainter, screen: npt.NDArray[np.float64]) -> None:
        # tag edges first so explicit links stay on top
        if self._show_tag_edges and len(self._tag_index):
            painter.setPen(QPen(TAG_LINK_COLOR, 0.5))
            painter.drawLines(self._edge_lines(self._tag_index, screen))
        if len(self._explicit_index):
            painter.setPen(QPen(LINK_COLOR, 1.0))
            painter.drawLines(self._edge_lines(self._explicit_index, screen))

    @staticmethod
    def _edge_lines(index: npt.NDArray[np.int64], screen: npt.NDArray[np.float64]) -> list[QLineF]:
        a = screen[index[:, 0]]
        b = screen[index[:, 1]]
        return [QLineF(a[k, 0], a[k, 1], b[k, 0], b[k, 1]) for k in range(len(index))]

    def _draw_nodes(self, painter: QPainter, screen: npt.NDArray[np.float64]) -> None:
        active = self._active_ids()
        painter.setPen(Qt.NoPen)
        for i, node in enumerate(self._graph.nodes.values()):
            is_active = node.id in active
            if is_active:
                color = NODE_ACTIVE_COLOR
            elif node.favorite:
                color = NODE_FAVORITE_COLOR
            else:
                color = NODE_COLOR
            radius = NODE_RADIUS_ACTIVE if is_active else NODE_RADIUS
            painter.setBrush(QBrush(color))
            painter.drawEllipse(QPointF(screen[i, 0], screen[i, 1]), radius, radius)

    def _draw_labels(self, painter: QPainter, screen: npt.NDArray[np.float64]) -> None:
        active = self._active_ids()
        font = QFont(self.font())
        font.setPointSize(9)
        painter.setFont(font)
        metrics = QFontMetrics(font)

        for i, node in enumerate(self._graph.nodes.values()):
            is_active = node.id in active
            if not (is_active or self._always_show_labels):
                continue
            text = truncate_label(node.label)
            w = metrics.horizontalAdvance(text)
            x = screen[i, 0] - w / 2
            y = screen[i, 1] + NODE_RADIUS + 6 + metrics.ascent()
            painter.setPen(NODE_ACTIVE_COLOR if is_active else LABEL_COLOR)
            painter.drawText(QPointF(x, y), text)

    def _draw_overlay(self, painter: QPainter) -> None:
        self._draw_box(painter, [self.overlay_line()], top_left=True)
        lines = self.hover_lines()
        if lines:
            self._draw_box(painter, lines, top_left=False)

    def _draw_box(self, painter: QPainter, lines: list[str], top_left: bool) -> None:
        metrics = QFontMetrics(painter.font())
        pad = 8
        width = max(metrics.horizontalAdvance(line) for line in lines) + 2 * pad
        height = metrics.height() * len(lines) + 2 * pad
        x = 12.0
        y = 12.0 if top_left else self.height() - height - 12.0
        rect = QRectF(x, y, width, height)

        painter.setPen(Qt.NoPen)
        painter.setBrush(OVERLAY_BG_COLOR)
        painter.drawRoundedRect(rect, 6, 6)
        painter.setPen(OVERLAY_TEXT_COLOR)
        for k, line in enumerate(lines):
            painter.drawText(QPointF(x + pad, y + pad + metrics.ascent() + k * metrics.height()), line)
