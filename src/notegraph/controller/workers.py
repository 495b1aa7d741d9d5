"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for work that must not block the GUI.

Why is this file needed?
------------------------
1. Responsiveness: fetching notes may hit a database or a slow disk. The fetch,
   link extraction and graph build run off the main thread while the view
   shows its loading page.
2. Signals: results and failures are handed back to the GUI thread through
   Qt Signals (queued connections), never by touching widgets directly.

Classes:
    GraphLoadWorker: Fetches notes once and builds the seeded Graph.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PySide6.QtCore import QThread, Signal

from notegraph.model.builder import GraphBuilder, SeedSettings
from notegraph.model.notes import NoteSource

logger = logging.getLogger(__name__)


class GraphLoadWorker(QThread):
    # (notes, graph) on success
    loaded = Signal(object, object)
    error_occurred = Signal(str)

    def __init__(
        self,
        source: NoteSource,
        seed_settings: Optional[SeedSettings] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        super().__init__()
        self.source = source
        self.seed_settings = seed_settings
        self.rng = rng

    def run(self) -> None:
        try:
            logger.info("Fetching notes in background thread...")
            notes = self.source.fetch_notes()

            builder = GraphBuilder(settings=self.seed_settings, rng=self.rng)
            graph = builder.build(notes)

            if self.isInterruptionRequested():
                logger.debug("Graph load finished after cancellation, result dropped.")
                return
            self.loaded.emit(notes, graph)

        except Exception as e:
            logger.exception("Graph load failed")
            self.error_occurred.emit(str(e) or e.__class__.__name__)
