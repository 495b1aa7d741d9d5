"""
Main Application Window
=======================
Standalone host for the graph view.

Why is this file needed?
------------------------
1. Hosting: in the full note-taking application the graph view is embedded in
   a larger shell. This window plays that shell: it mounts a GraphView for a
   note source and receives its "node activated" events.
2. Routing: File -> Open / Reload remount the view (a new fetch, a new graph).
   Navigation requests are re-emitted as ``note_requested`` for whoever opens
   notes.
"""
import logging
import os
from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QFileDialog, QMainWindow

from notegraph.config import ViewSettings
from notegraph.model.notes import JsonNoteSource, NoteSource
from notegraph.view.graph_view import GraphView

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Knowledge Graph"


class MainWindow(QMainWindow):
    note_requested = Signal(str)

    def __init__(self, source: NoteSource, settings: Optional[ViewSettings] = None) -> None:
        super().__init__()
        self.source: NoteSource = source
        self.settings: ViewSettings = settings or ViewSettings()
        self.graph_view: Optional[GraphView] = None

        self.resize(1200, 800)
        self.update_window_title()

        self._create_actions()
        self._create_menus()

        self.mount_view()

    def _create_actions(self) -> None:
        self.act_open = QAction("Open Notes...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_reload = QAction("Reload", self)
        self.act_reload.setShortcut("F5")
        self.act_reload.triggered.connect(self.mount_view)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()
        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_open)
        file_menu.addAction(self.act_reload)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

    # --- HELPER METHODS ---

    def update_window_title(self) -> None:
        path = getattr(self.source, "path", None)
        name = os.path.basename(path) if path else "notes"
        self.setWindowTitle(f"{VISIBLE_APP_NAME} - [{name}]")

    def mount_view(self) -> None:
        """(Re)open the graph view: every mount fetches and builds a fresh graph."""
        self.unmount_view()
        s = self.settings
        self.graph_view = GraphView(
            self.source,
            layout_settings=s.layout,
            seed_settings=s.seed,
            camera_settings=s.camera,
        )
        self.graph_view.node_activated.connect(self.on_node_activated)
        self.setCentralWidget(self.graph_view)
        self.graph_view.start()

    def unmount_view(self) -> None:
        if self.graph_view is None:
            return
        self.graph_view.stop()
        self.graph_view.node_activated.disconnect(self.on_node_activated)
        self.graph_view = None

    # --- SLOTS ---

    def on_node_activated(self, note_id: str) -> None:
        title = note_id
        n_backlinks = 0
        if self.graph_view is not None:
            session = self.graph_view.session
            if session.graph is not None and note_id in session.graph.nodes:
                title = session.graph.nodes[note_id].label
            n_backlinks = len(session.backlinks(note_id))
        logger.info(f"Open note requested: {note_id}")
        self.statusBar().showMessage(f"Open note: {title} ({n_backlinks} backlinks)", 5000)
        self.note_requested.emit(note_id)

    def on_file_open(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open Notes", "", "JSON (*.json)")
        if not path:
            return
        self.source = JsonNoteSource(path)
        self.update_window_title()
        self.mount_view()

    def closeEvent(self, event) -> None:
        self.unmount_view()
        super().closeEvent(event)
