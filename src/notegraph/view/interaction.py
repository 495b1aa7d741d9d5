"""
Pointer Interaction
===================
State machine turning pointer/wheel input into camera changes, hover and
"node activated" events. Pure Python, no Qt: the canvas widget translates
Qt events into calls on ``InteractionController``.

States::

    Idle ──move over node──> Hovering(node) ──move off──> Idle
    Idle/Hovering ──press on empty space──> Dragging ──release/leave──> Idle
    Idle/Hovering ──press on node──> (activate node, state unchanged)
    any ──wheel──> zoom (state unchanged)

Each state is its own frozen dataclass so combinations such as
"dragging while a node is clicked" cannot be expressed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Union

import numpy as np

from notegraph.view.camera import Camera

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Hovering:
    node_id: str


@dataclass(frozen=True)
class Dragging:
    start_pointer: tuple[float, float]
    start_pan: tuple[float, float]


PointerState = Union[Idle, Hovering, Dragging]

IDLE = Idle()


def nearest_node(
    wx: float,
    wy: float,
    positions: npt.NDArray[np.float64],
    node_ids: Sequence[str],
    max_distance: float,
) -> Optional[str]:
    """
    Id of the node closest to (wx, wy) within ``max_distance`` world units.

    On exact ties the first node in iteration order wins.
    """
    if len(node_ids) == 0:
        return None
    pts = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
    d2 = (pts[:, 0] - wx) ** 2 + (pts[:, 1] - wy) ** 2
    idx = int(np.argmin(d2))
    if d2[idx] < max_distance * max_distance:
        return node_ids[idx]
    return None


class InteractionController:
    def __init__(self, camera: Camera) -> None:
        self.camera = camera
        self.state: PointerState = IDLE
        self.selected: Optional[str] = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(state={self.state!r}, selected={self.selected!r})"

    @property
    def hovered(self) -> Optional[str]:
        return self.state.node_id if isinstance(self.state, Hovering) else None

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    def hit_test(
        self,
        sx: float,
        sy: float,
        positions: npt.NDArray[np.float64],
        node_ids: Sequence[str],
    ) -> Optional[str]:
        """Node under the screen point, using a fixed pixel radius."""
        wx, wy = self.camera.screen_to_world(sx, sy)
        radius = self.camera.settings.hit_radius_px / self.camera.zoom
        return nearest_node(wx, wy, positions, node_ids, radius)

    # ---- pointer events ----

    def pointer_move(
        self,
        sx: float,
        sy: float,
        positions: npt.NDArray[np.float64],
        node_ids: Sequence[str],
    ) -> bool:
        """
        Returns:
            True if the hovered node changed.
        """
        state = self.state
        if isinstance(state, Dragging):
            x0, y0 = state.start_pointer
            px, py = state.start_pan
            self.camera.set_pan(px + (sx - x0), py + (sy - y0))
            return False

        before = self.hovered
        node_id = self.hit_test(sx, sy, positions, node_ids)
        self.state = Hovering(node_id) if node_id is not None else IDLE
        return node_id != before

    def pointer_down(
        self,
        sx: float,
        sy: float,
        positions: npt.NDArray[np.float64],
        node_ids: Sequence[str],
    ) -> Optional[str]:
        """
        Press the primary button.

        Returns:
            The activated node id if the press landed on a node, else None
            (and a pan drag starts).
        """
        if isinstance(self.state, Dragging):
            return None

        node_id = self.hit_test(sx, sy, positions, node_ids)
        if node_id is not None:
            self.selected = node_id
            logger.debug(f"Node activated: {node_id}")
            return node_id

        self.state = Dragging(start_pointer=(float(sx), float(sy)), start_pan=self.camera.pan)
        return None

    def pointer_up(self) -> None:
        if isinstance(self.state, Dragging):
            self.state = IDLE

    def pointer_leave(self) -> bool:
        """Pointer left the surface. Ends a drag and clears hover."""
        changed = self.hovered is not None
        self.state = IDLE
        return changed

    def wheel(self, delta: float) -> float:
        """Positive delta zooms in, negative zooms out. Returns the new zoom."""
        step = self.camera.settings.wheel_step
        if delta > 0:
            return self.camera.zoom_by(step)
        if delta < 0:
            return self.camera.zoom_by(1.0 / step)
        return self.camera.zoom

    # ---- button actions ----

    def zoom_in(self) -> float:
        return self.camera.zoom_by(self.camera.settings.button_zoom_in)

    def zoom_out(self) -> float:
        return self.camera.zoom_by(self.camera.settings.button_zoom_out)

    def reset_view(self) -> None:
        self.camera.reset()
