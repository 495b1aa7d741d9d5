"""
Camera
======
Pan/zoom mapping between graph world coordinates and widget pixels.

world -> screen::

    sx = (x - center_x) * zoom + pan_x + width / 2
    sy = (y - center_y) * zoom + pan_y + height / 2

The scene center therefore sits in the middle of the viewport at zero pan.
Zoom is anchored at the pan origin, not at the pointer.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CameraSettings:
    min_zoom: float = 0.3
    max_zoom: float = 3.0
    wheel_step: float = 1.1        # zoom factor per wheel notch (inverse when zooming out)
    button_zoom_in: float = 1.2
    button_zoom_out: float = 0.8
    hit_radius_px: float = 20.0

    def __post_init__(self) -> None:
        if not 0.0 < self.min_zoom <= self.max_zoom:
            raise ValueError(f"Invalid zoom range [{self.min_zoom}, {self.max_zoom}].")
        if self.wheel_step <= 1.0:
            raise ValueError("wheel_step must be greater than 1.")
        if self.hit_radius_px <= 0.0:
            raise ValueError("hit_radius_px must be positive.")


class Camera:
    def __init__(
        self,
        settings: CameraSettings | None = None,
        center: tuple[float, float] = (500.0, 350.0),
        viewport: tuple[int, int] = (1, 1),
    ) -> None:
        self.settings = settings or CameraSettings()
        self.center_x, self.center_y = center
        self.width, self.height = (max(1, int(v)) for v in viewport)
        self.zoom: float = 1.0
        self.pan_x: float = 0.0
        self.pan_y: float = 0.0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(zoom={self.zoom:.2f}, pan=({self.pan_x:.1f}, {self.pan_y:.1f}), "
            f"viewport={self.width}x{self.height})"
        )

    @property
    def pan(self) -> tuple[float, float]:
        return self.pan_x, self.pan_y

    def set_pan(self, x: float, y: float) -> None:
        self.pan_x = float(x)
        self.pan_y = float(y)

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, int(width))
        self.height = max(1, int(height))

    def set_zoom(self, zoom: float) -> float:
        s = self.settings
        self.zoom = min(s.max_zoom, max(s.min_zoom, float(zoom)))
        return self.zoom

    def zoom_by(self, factor: float) -> float:
        return self.set_zoom(self.zoom * factor)

    def reset(self) -> None:
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    # ---- transforms ----

    def world_to_screen(self, x: float, y: float) -> tuple[float, float]:
        sx = (x - self.center_x) * self.zoom + self.pan_x + self.width / 2
        sy = (y - self.center_y) * self.zoom + self.pan_y + self.height / 2
        return sx, sy

    def screen_to_world(self, sx: float, sy: float) -> tuple[float, float]:
        x = (sx - self.width / 2 - self.pan_x) / self.zoom + self.center_x
        y = (sy - self.height / 2 - self.pan_y) / self.zoom + self.center_y
        return x, y
