"""
Graph View Session
==================
Lifecycle of one mounted graph view.

Why is this file needed?
------------------------
1. Ordering: the note fetch is issued exactly once, at mount time, and the
   simulation timer is only started after it has resolved.
2. Cleanup: unmounting must stop the tick timer and drop late worker results;
   a surviving timer would keep mutating positions nobody looks at.

Both the simulation tick and the canvas frame timer live on the Qt main
thread, so the renderer and the engine never run at the same time.

Classes:
    SessionState: Coarse lifecycle state shown by the view.
    GraphSession: Owns the load worker, the layout engine and its tick timer.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

import numpy as np
from PySide6.QtCore import QObject, QTimer, Signal, Slot

from notegraph.controller.workers import GraphLoadWorker
from notegraph.model.builder import SeedSettings
from notegraph.model.graph import Graph
from notegraph.model.layout import ForceLayoutEngine, LayoutSettings
from notegraph.model.links import Backlink, find_backlinks
from notegraph.model.notes import Note, NoteSource
from notegraph.model.stats import LinkStats, link_stats

logger = logging.getLogger(__name__)

# Workers of stopped sessions that are still running. A QThread must not be
# garbage collected before run() returns.
_RETIRED_WORKERS: set[GraphLoadWorker] = set()


def _retire(worker: GraphLoadWorker) -> None:
    _RETIRED_WORKERS.add(worker)
    worker.finished.connect(lambda: _RETIRED_WORKERS.discard(worker))


class SessionState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    RUNNING = "running"
    EMPTY = "empty"
    FAILED = "failed"
    STOPPED = "stopped"


class GraphSession(QObject):
    loading_started = Signal()
    graph_ready = Signal(object, object)  # (Graph, ForceLayoutEngine)
    empty = Signal(object)                # Graph (possibly without nodes)
    failed = Signal(str)
    settled = Signal()

    def __init__(
        self,
        source: NoteSource,
        layout_settings: Optional[LayoutSettings] = None,
        seed_settings: Optional[SeedSettings] = None,
        rng: Optional[np.random.Generator] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.source = source
        self.layout_settings = layout_settings or LayoutSettings()
        self.seed_settings = seed_settings or SeedSettings(
            center_x=self.layout_settings.center_x,
            center_y=self.layout_settings.center_y,
        )
        self.rng = rng

        self.state: SessionState = SessionState.IDLE
        self.notes: list[Note] = []
        self.graph: Optional[Graph] = None
        self.stats: Optional[LinkStats] = None
        self.engine: Optional[ForceLayoutEngine] = None
        self.error_message: Optional[str] = None
        self.worker: Optional[GraphLoadWorker] = None

        self._tick_timer = QTimer(self)
        self._tick_timer.setInterval(self.layout_settings.tick_interval_ms)
        self._tick_timer.timeout.connect(self._on_tick)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def is_simulating(self) -> bool:
        return self._tick_timer.isActive()

    def backlinks(self, note_id: str) -> list[Backlink]:
        """Notes of the loaded set that link to ``note_id``."""
        return find_backlinks(self.notes, note_id)

    def start(self) -> None:
        """Mount: issue the single asynchronous fetch."""
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"Session already started (state: {self.state.value}).")

        self.state = SessionState.LOADING
        self.worker = GraphLoadWorker(self.source, seed_settings=self.seed_settings, rng=self.rng)
        self.worker.loaded.connect(self._on_loaded)
        self.worker.error_occurred.connect(self._on_error)
        self.loading_started.emit()
        self.worker.start()
        logger.info(f"Graph session started with source {self.source!r}.")

    def stop(self) -> None:
        """Unmount: stop the simulation and ignore any pending fetch result."""
        if self.state is SessionState.STOPPED:
            return
        self._tick_timer.stop()

        worker = self.worker
        if worker is not None:
            try:
                worker.loaded.disconnect(self._on_loaded)
                worker.error_occurred.disconnect(self._on_error)
            except (RuntimeError, TypeError):
                # already disconnected or the C++ object is gone
                pass
            if worker.isRunning():
                worker.requestInterruption()
                _retire(worker)
        self.worker = None
        self.engine = None
        self.state = SessionState.STOPPED
        logger.info("Graph session stopped.")

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    @Slot(object, object)
    def _on_loaded(self, notes: list[Note], graph: Graph) -> None:
        if self.state is not SessionState.LOADING:
            return
        self.notes = list(notes)
        self.graph = graph
        self.stats = link_stats(graph, self.notes)
        logger.info(
            f"Received {len(notes)} notes ({len(self.stats.orphans)} orphans, {len(self.stats.hubs)} hubs)."
        )

        if graph.is_empty:
            self.state = SessionState.EMPTY
            self.empty.emit(graph)
            return

        self.engine = ForceLayoutEngine(graph, self.layout_settings)
        self.state = SessionState.RUNNING
        self.graph_ready.emit(graph, self.engine)
        self._tick_timer.start()

    @Slot(str)
    def _on_error(self, message: str) -> None:
        if self.state is not SessionState.LOADING:
            return
        self.state = SessionState.FAILED
        self.error_message = message
        logger.error(f"Graph could not be loaded: {message}")
        self.failed.emit(message)

    @Slot()
    def _on_tick(self) -> None:
        engine = self.engine
        if engine is None:
            self._tick_timer.stop()
            return
        engine.step()
        if engine.frozen:
            self._tick_timer.stop()
            self.settled.emit()
