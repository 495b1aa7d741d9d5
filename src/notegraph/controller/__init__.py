"""
The CONTROLLER layer connects note sources, the model and the view:
background loading and the lifecycle of a mounted graph view.
"""
from notegraph.controller.session import GraphSession, SessionState
from notegraph.controller.workers import GraphLoadWorker

__all__ = [
    "GraphLoadWorker",
    "GraphSession",
    "SessionState",
]
