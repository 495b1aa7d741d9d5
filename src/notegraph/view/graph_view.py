"""
Graph View Panel
================
The mountable knowledge-graph view: toolbar, status pages and the canvas.

Pages:
    loading -> shown while the fetch is in flight
    error   -> terminal, shows the failure reason (reopen the view to retry)
    empty   -> no notes, or notes without any connection
    graph   -> the live canvas
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QCheckBox, QHBoxLayout, QLabel, QPushButton, QStackedWidget, QVBoxLayout, QWidget
)

from notegraph.controller.session import GraphSession, SessionState
from notegraph.model.builder import SeedSettings
from notegraph.model.graph import Graph
from notegraph.model.layout import ForceLayoutEngine, LayoutSettings
from notegraph.model.notes import NoteSource
from notegraph.view.camera import CameraSettings
from notegraph.view.graph_canvas import GraphCanvas

logger = logging.getLogger(__name__)

PAGE_LOADING = 0
PAGE_ERROR = 1
PAGE_EMPTY = 2
PAGE_GRAPH = 3


class GraphView(QWidget):
    # Forwarded from the canvas: the host opens this note
    node_activated = Signal(str)

    def __init__(
        self,
        source: NoteSource,
        layout_settings: Optional[LayoutSettings] = None,
        seed_settings: Optional[SeedSettings] = None,
        camera_settings: Optional[CameraSettings] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.session = GraphSession(
            source,
            layout_settings=layout_settings,
            seed_settings=seed_settings,
            parent=self,
        )

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # --- Toolbar ---
        toolbar = QHBoxLayout()
        toolbar.setContentsMargins(8, 4, 8, 4)

        self.chk_tag_links = QCheckBox("Show tag connections")
        self.chk_tag_links.toggled.connect(self.on_tag_links_toggled)
        toolbar.addWidget(self.chk_tag_links)

        self.chk_labels = QCheckBox("Always show labels")
        self.chk_labels.toggled.connect(self.on_labels_toggled)
        toolbar.addWidget(self.chk_labels)

        toolbar.addStretch()

        self.btn_zoom_in = QPushButton("+")
        self.btn_zoom_out = QPushButton("−")
        self.btn_reset = QPushButton("Reset view")
        for btn in (self.btn_zoom_in, self.btn_zoom_out):
            btn.setFixedWidth(32)
        toolbar.addWidget(self.btn_zoom_in)
        toolbar.addWidget(self.btn_zoom_out)
        toolbar.addWidget(self.btn_reset)
        layout.addLayout(toolbar)

        # --- Pages ---
        self.stack = QStackedWidget()

        self.lbl_loading = self._make_page_label("Loading knowledge graph...", "gray")
        self.lbl_error = self._make_page_label("", "red")
        self.lbl_empty = self._make_page_label(
            "No connections yet.\nUse [[note title]] to link notes together.", "gray"
        )
        self.canvas = GraphCanvas(camera_settings)

        self.stack.addWidget(self.lbl_loading)  # PAGE_LOADING
        self.stack.addWidget(self.lbl_error)    # PAGE_ERROR
        self.stack.addWidget(self.lbl_empty)    # PAGE_EMPTY
        self.stack.addWidget(self.canvas)       # PAGE_GRAPH
        layout.addWidget(self.stack)

        self._set_controls_enabled(False)

        # --- Signal connections ---
        self.btn_zoom_in.clicked.connect(self.canvas.zoom_in)
        self.btn_zoom_out.clicked.connect(self.canvas.zoom_out)
        self.btn_reset.clicked.connect(self.canvas.reset_view)
        self.canvas.node_activated.connect(self.node_activated)

        self.session.loading_started.connect(self.on_loading_started)
        self.session.graph_ready.connect(self.on_graph_ready)
        self.session.empty.connect(self.on_empty)
        self.session.failed.connect(self.on_failed)

    # --- PROPERTIES ---

    @property
    def current_page(self) -> int:
        return self.stack.currentIndex()

    # --- LIFECYCLE ---

    def start(self) -> None:
        """Mount the view: fetch notes and, once loaded, start both loops."""
        self.session.start()

    def stop(self) -> None:
        """Unmount the view: stop simulation and rendering."""
        self.session.stop()
        self.canvas.detach()
        self._set_controls_enabled(False)

    def closeEvent(self, event) -> None:
        self.stop()
        super().closeEvent(event)

    # --- SLOTS ---

    def on_loading_started(self) -> None:
        self.stack.setCurrentIndex(PAGE_LOADING)

    def on_graph_ready(self, graph: Graph, engine: ForceLayoutEngine) -> None:
        self.canvas.set_engine(graph, engine, stats=self.session.stats)
        self.canvas.set_show_tag_edges(self.chk_tag_links.isChecked())
        self.canvas.set_always_show_labels(self.chk_labels.isChecked())
        self.stack.setCurrentIndex(PAGE_GRAPH)
        self.canvas.start_rendering()
        self._set_controls_enabled(True)

    def on_empty(self, graph: Graph) -> None:
        if graph.node_count == 0:
            self.lbl_empty.setText("No notes yet.\nCreate some notes to see your knowledge graph.")
        self.stack.setCurrentIndex(PAGE_EMPTY)

    def on_failed(self, message: str) -> None:
        self.lbl_error.setText(f"Failed to load graph:\n{message}")
        self.stack.setCurrentIndex(PAGE_ERROR)

    def on_tag_links_toggled(self, checked: bool) -> None:
        self.canvas.set_show_tag_edges(checked)

    def on_labels_toggled(self, checked: bool) -> None:
        self.canvas.set_always_show_labels(checked)

    # --- HELPERS ---

    @staticmethod
    def _make_page_label(text: str, color: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setAlignment(Qt.AlignCenter)
        lbl.setWordWrap(True)
        lbl.setStyleSheet(f"color: {color};")
        return lbl

    def _set_controls_enabled(self, enabled: bool) -> None:
        for w in (self.btn_zoom_in, self.btn_zoom_out, self.btn_reset):
            w.setEnabled(enabled)

    @property
    def state(self) -> SessionState:
        return self.session.state
