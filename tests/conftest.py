import os

# Must be set before any Qt module creates the application
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest

from notegraph.model.notes import Note


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def tagged_notes():
    return [
        Note(id="1", title="Alpha", body="see [[Beta]]", tags=("x",)),
        Note(id="2", title="Beta", body="", tags=("x",)),
        Note(id="3", title="Gamma", body="", tags=("x",)),
    ]


@pytest.fixture
def chain_notes():
    return [
        Note(id="a", title="A", body="[[B]]"),
        Note(id="b", title="B", body="[[C]]"),
        Note(id="c", title="C", body="[[D]]"),
        Note(id="d", title="D", body="[[A]]"),
    ]
