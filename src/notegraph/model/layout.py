"""
Force Layout Engine
===================
Continuous force-directed layout of a Graph.

Each tick accumulates three forces per node and integrates them:

1. Pairwise repulsion ``repulsion / d**2`` between every pair of nodes,
   with ``d`` clamped to ``min_distance`` so near-coincident nodes never
   produce inf/NaN.
2. Centering gravity ``gravity * (center - p)``.
3. Edge springs ``attraction * (d - rest_length)`` pulling endpoints together.

Integration::

    v += F * dt
    p += v * dt
    v *= damping

Positions are published as a new read-only array at the end of each tick.
A reader holding a ``snapshot()`` keeps a consistent view of one tick even
if the simulation advances meanwhile.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numba as nb
import numpy as np

from notegraph.model.graph import Graph

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass
class LayoutSettings:
    repulsion: float = 800.0
    gravity: float = 0.005
    attraction: float = 0.03
    rest_length: float = 120.0
    dt_factor: float = 0.3
    damping: float = 0.85
    min_distance: float = 1.0
    tick_interval_ms: int = 20
    center_x: float = 500.0
    center_y: float = 350.0
    include_tag_edges: bool = True
    freeze_energy: Optional[float] = None   # None: run until stopped

    def __post_init__(self) -> None:
        if not 0.0 < self.damping <= 1.0:
            raise ValueError(f"damping must be in (0, 1], got {self.damping}.")
        if self.min_distance <= 0.0:
            raise ValueError("min_distance must be positive.")
        if self.dt_factor <= 0.0:
            raise ValueError("dt_factor must be positive.")
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive.")
        if self.freeze_energy is not None and self.freeze_energy < 0.0:
            raise ValueError("freeze_energy must be non-negative.")


@nb.jit(cache=True, fastmath=True)
def _repulsion_forces(
    positions: npt.NDArray[np.float64],
    strength: float,
    min_distance: float,
) -> npt.NDArray[np.float64]:
    """
    Inverse-square repulsion for every unordered pair.

    Args:
        positions: (N, 2) array of node positions.
        strength: Repulsion constant.
        min_distance: Lower clamp of the pair distance.

    Returns:
        (N, 2) array of accumulated forces.
    """
    n = positions.shape[0]
    forces = np.zeros((n, 2), dtype=np.float64)
    for i in range(n):
        xi = positions[i, 0]
        yi = positions[i, 1]
        for j in range(i + 1, n):
            dx = xi - positions[j, 0]
            dy = yi - positions[j, 1]
            dist = math.sqrt(dx * dx + dy * dy)
            if dist < min_distance:
                dist = min_distance
            scale = strength / (dist * dist) / dist
            fx = dx * scale
            fy = dy * scale
            forces[i, 0] += fx
            forces[i, 1] += fy
            forces[j, 0] -= fx
            forces[j, 1] -= fy
    return forces


class ForceLayoutEngine:
    """
    Physics state for one mounted graph view.

    The engine has no timer of its own; the owner calls ``step()`` at
    ``settings.tick_interval_ms``.
    """

    def __init__(self, graph: Graph, settings: LayoutSettings | None = None) -> None:
        self.graph = graph
        self.settings = settings or LayoutSettings()
        self.node_ids: list[str] = graph.node_ids

        n = len(self.node_ids)
        positions = np.array(graph.positions(), dtype=np.float64).reshape(n, 2)
        velocities = np.array(
            [(node.vx, node.vy) for node in graph.nodes.values()], dtype=np.float64
        ).reshape(n, 2)
        self._publish(positions, velocities)

        pairs = [
            (graph.index_of(edge.source), graph.index_of(edge.target))
            for edge in graph.edges(include_tag_edges=self.settings.include_tag_edges)
        ]
        self.edge_index: npt.NDArray[np.int64] = np.array(pairs, dtype=np.int64).reshape(-1, 2)

        self.tick_count: int = 0
        self.frozen: bool = False

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(nodes={len(self.node_ids)}, "
            f"edges={len(self.edge_index)}, ticks={self.tick_count})"
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def positions(self) -> npt.NDArray[np.float64]:
        return self._positions

    @property
    def velocities(self) -> npt.NDArray[np.float64]:
        return self._velocities

    def snapshot(self) -> npt.NDArray[np.float64]:
        """Most recently published (N, 2) read-only position array."""
        return self._positions

    def compute_forces(self, positions: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Total force on every node for the given positions."""
        s = self.settings
        n = positions.shape[0]
        if n == 0:
            return np.zeros((0, 2), dtype=np.float64)

        if n > 1:
            forces = _repulsion_forces(positions, s.repulsion, s.min_distance)
        else:
            forces = np.zeros((n, 2), dtype=np.float64)

        center = np.array([s.center_x, s.center_y], dtype=np.float64)
        forces += s.gravity * (center - positions)

        if len(self.edge_index):
            src = self.edge_index[:, 0]
            dst = self.edge_index[:, 1]
            delta = positions[dst] - positions[src]
            dist = np.maximum(np.hypot(delta[:, 0], delta[:, 1]), s.min_distance)
            magnitude = s.attraction * (dist - s.rest_length)
            pull = delta * (magnitude / dist)[:, None]
            np.add.at(forces, src, pull)
            np.add.at(forces, dst, -pull)

        return forces

    def step(self) -> bool:
        """
        Advance the simulation by one tick.

        Returns:
            False if the engine is frozen and nothing moved.
        """
        if self.frozen:
            return False

        s = self.settings
        forces = self.compute_forces(self._positions)
        velocities = self._velocities + forces * s.dt_factor
        positions = self._positions + velocities * s.dt_factor
        velocities = velocities * s.damping
        self._publish(positions, velocities)
        self.tick_count += 1

        if s.freeze_energy is not None and self.kinetic_energy() < s.freeze_energy:
            self.frozen = True
            logger.info(f"Layout settled after {self.tick_count} ticks, simulation frozen.")
        return True

    def run(self, ticks: int) -> int:
        """Run up to ``ticks`` steps. Returns the number actually performed."""
        done = 0
        for _ in range(ticks):
            if not self.step():
                break
            done += 1
        return done

    def kinetic_energy(self) -> float:
        """0.5 * sum(|v|^2) over all nodes (unit mass)."""
        v = self._velocities
        return 0.5 * float(np.einsum("ij,ij->", v, v))

    def wake(self) -> None:
        """Resume a frozen simulation."""
        if self.frozen:
            logger.debug("Layout simulation resumed.")
        self.frozen = False

    def sync_to_graph(self) -> None:
        """Copy the current positions and velocities back onto the GraphNodes."""
        for i, node in enumerate(self.graph.nodes.values()):
            node.x, node.y = (float(c) for c in self._positions[i])
            node.vx, node.vy = (float(c) for c in self._velocities[i])

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _publish(self, positions: npt.NDArray[np.float64], velocities: npt.NDArray[np.float64]) -> None:
        positions.setflags(write=False)
        # single reference swap: readers see either the old or the new tick
        self._positions = positions
        self._velocities = velocities
