from __future__ import annotations

import math
from dataclasses import dataclass

from domain.models import Point, Workflow
from domain.services.step_layout import StepLayoutConfig, input_anchor, output_anchor

CONTROL_OFFSET_RATIO = 0.5
MIN_CONTROL_OFFSET = 50.0
HIT_TOLERANCE = 6.0
CURVE_SEGMENTS = 32


@dataclass(frozen=True)
class CubicCurve:
    start: Point
    control1: Point
    control2: Point
    end: Point

    def point_at(self, t: float) -> Point:
        u = 1.0 - t
        a = u * u * u
        b = 3 * u * u * t
        c = 3 * u * t * t
        d = t * t * t
        return Point(
            a * self.start.x + b * self.control1.x + c * self.control2.x + d * self.end.x,
            a * self.start.y + b * self.control1.y + c * self.control2.y + d * self.end.y,
        )

    def sample(self, segments: int = CURVE_SEGMENTS) -> list[Point]:
        segments = max(1, segments)
        return [self.point_at(idx / segments) for idx in range(segments + 1)]

    def to_svg_path(self) -> str:
        return (
            f"M {_fmt(self.start.x)} {_fmt(self.start.y)} "
            f"C {_fmt(self.control1.x)} {_fmt(self.control1.y)}, "
            f"{_fmt(self.control2.x)} {_fmt(self.control2.y)}, "
            f"{_fmt(self.end.x)} {_fmt(self.end.y)}"
        )

    def distance_to(self, point: Point, segments: int = CURVE_SEGMENTS) -> float:
        samples = self.sample(segments)
        return min(
            _distance_to_segment(point, samples[idx], samples[idx + 1])
            for idx in range(len(samples) - 1)
        )


@dataclass(frozen=True)
class ConnectionView:
    source_id: str
    target_id: str
    curve: CubicCurve
    dashed: bool = False

    @property
    def path(self) -> str:
        return self.curve.to_svg_path()


def connection_curve(start: Point, end: Point) -> CubicCurve:
    # Short or vertical edges still bow outwards thanks to the offset floor.
    offset = max(abs(end.x - start.x) * CONTROL_OFFSET_RATIO, MIN_CONTROL_OFFSET)
    return CubicCurve(
        start=start,
        control1=Point(start.x + offset, start.y),
        control2=Point(end.x - offset, end.y),
        end=end,
    )


def connection_views(workflow: Workflow, config: StepLayoutConfig) -> list[ConnectionView]:
    views: list[ConnectionView] = []
    for source in workflow.steps:
        for target_id in source.connections:
            target = workflow.get_step(target_id)
            if target is None:
                continue
            curve = connection_curve(output_anchor(source, config), input_anchor(target, config))
            views.append(ConnectionView(source_id=source.id, target_id=target_id, curve=curve))
    return views


def pending_connection_view(
    workflow: Workflow, source_id: str, cursor: Point, config: StepLayoutConfig
) -> ConnectionView | None:
    source = workflow.get_step(source_id)
    if source is None:
        return None
    return ConnectionView(
        source_id=source_id,
        target_id="",
        curve=connection_curve(output_anchor(source, config), cursor),
        dashed=True,
    )


def find_connection_at(
    workflow: Workflow,
    point: Point,
    config: StepLayoutConfig,
    tolerance: float = HIT_TOLERANCE,
) -> tuple[str, str] | None:
    for view in reversed(connection_views(workflow, config)):
        if view.curve.distance_to(point) <= tolerance:
            return view.source_id, view.target_id
    return None


def _distance_to_segment(point: Point, start: Point, end: Point) -> float:
    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(point.x - start.x, point.y - start.y)
    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    t = min(max(t, 0.0), 1.0)
    closest_x = start.x + t * dx
    closest_y = start.y + t * dy
    return math.hypot(point.x - closest_x, point.y - closest_y)


def _fmt(value: float) -> str:
    return f"{value:g}"
