from __future__ import annotations

from dataclasses import dataclass, field

from domain.models import Point, Size

MIN_SCALE = 0.5
MAX_SCALE = 2.0
ZOOM_STEP = 0.1
ZOOM_SENSITIVITY = 0.001
GRID_SPACING = 20.0
DEFAULT_VIEW_SIZE = Size(800.0, 600.0)


def clamp_scale(scale: float, min_scale: float = MIN_SCALE, max_scale: float = MAX_SCALE) -> float:
    return min(max(min_scale, scale), max_scale)


@dataclass(frozen=True)
class GridBackground:
    spacing: float
    offset: Point


@dataclass(frozen=True)
class Viewport:
    """Pan offset (screen pixels) and zoom factor of the canvas.

    Zoom is anchored at the pan origin: changing the scale never moves ``pan``.
    """

    pan: Point = field(default_factory=lambda: Point(0.0, 0.0))
    scale: float = 1.0

    def __post_init__(self) -> None:
        clamped = clamp_scale(self.scale)
        if clamped != self.scale:
            object.__setattr__(self, "scale", clamped)

    def screen_to_world(self, point: Point) -> Point:
        return Point((point.x - self.pan.x) / self.scale, (point.y - self.pan.y) / self.scale)

    def world_to_screen(self, point: Point) -> Point:
        return Point(point.x * self.scale + self.pan.x, point.y * self.scale + self.pan.y)

    def screen_delta_to_world(self, dx: float, dy: float) -> Point:
        return Point(dx / self.scale, dy / self.scale)

    def panned_by(self, dx: float, dy: float) -> Viewport:
        if dx == 0 and dy == 0:
            return self
        return Viewport(pan=Point(self.pan.x + dx, self.pan.y + dy), scale=self.scale)

    def zoomed_to(self, scale: float) -> Viewport:
        return Viewport(pan=self.pan, scale=clamp_scale(scale))

    def zoomed_by(self, delta: float) -> Viewport:
        return self.zoomed_to(self.scale + delta)

    def wheel_zoom(self, delta_y: float) -> Viewport:
        return self.zoomed_by(-delta_y * ZOOM_SENSITIVITY)

    def view_center(self, view_size: Size | None = None) -> Point:
        size = view_size or DEFAULT_VIEW_SIZE
        return self.screen_to_world(Point(size.width / 2, size.height / 2))

    def grid_background(self) -> GridBackground:
        return GridBackground(spacing=GRID_SPACING * self.scale, offset=self.pan)

    def zoom_percent(self) -> int:
        return round(self.scale * 100)

    @classmethod
    def reset(cls) -> Viewport:
        return cls()
