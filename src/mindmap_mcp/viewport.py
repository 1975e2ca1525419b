"""
Screen/world coordinate conversion, anchored zoom and panning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from mindmap_mcp.config import MAX_ZOOM, MIN_ZOOM, ZOOM_EPSILON
from mindmap_mcp.models import Point, clamp

logger = logging.getLogger("mindmap-mcp.viewport")


def screen_to_world(p: Point, pan: Point, zoom: float) -> Point:
    return Point((p.x - pan.x) / zoom, (p.y - pan.y) / zoom)


def world_to_screen(p: Point, pan: Point, zoom: float) -> Point:
    return Point(p.x * zoom + pan.x, p.y * zoom + pan.y)


@dataclass
class Viewport:
    """Zoom scale plus world-to-screen translation."""
    zoom_scale: float = 1.0
    pan_offset: Point = field(default_factory=lambda: Point(0, 0))
    zoom_sensitivity: float = 1.0

    def __post_init__(self) -> None:
        self.zoom_scale = clamp(self.zoom_scale, MIN_ZOOM, MAX_ZOOM)

    def screen_to_world(self, p: Point) -> Point:
        return screen_to_world(p, self.pan_offset, self.zoom_scale)

    def world_to_screen(self, p: Point) -> Point:
        return world_to_screen(p, self.pan_offset, self.zoom_scale)

    def process_zoom(self, delta: float, anchor: Point) -> bool:
        """Multiply the zoom by *delta*, keeping the world point under *anchor* fixed.

        Returns False when the clamped change is negligible and nothing moved.
        """
        damped = 1 + (delta - 1) * self.zoom_sensitivity
        old_zoom = self.zoom_scale
        new_zoom = clamp(old_zoom * damped, MIN_ZOOM, MAX_ZOOM)
        if abs(new_zoom - old_zoom) <= ZOOM_EPSILON:
            return False

        world_anchor = screen_to_world(anchor, self.pan_offset, old_zoom)
        self.zoom_scale = new_zoom
        self.pan_offset = Point(
            anchor.x - world_anchor.x * new_zoom,
            anchor.y - world_anchor.y * new_zoom,
        )
        logger.debug("Zoom %.4f -> %.4f around (%.1f, %.1f)", old_zoom, new_zoom, anchor.x, anchor.y)
        return True

    def pan(self, delta: Point) -> None:
        self.pan_offset = self.pan_offset + delta

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_offset = Point(self.pan_offset.x + dx, self.pan_offset.y + dy)

    def center_on(self, world_point: Point, screen_size: tuple[float, float]) -> None:
        """Pan so *world_point* sits in the middle of a screen of the given size."""
        w, h = screen_size
        self.pan_offset = Point(
            w / 2 - world_point.x * self.zoom_scale,
            h / 2 - world_point.y * self.zoom_scale,
        )

    def visible_center(self, screen_size: tuple[float, float]) -> Point:
        w, h = screen_size
        return self.screen_to_world(Point(w / 2, h / 2))

    def to_dict(self) -> dict:
        return {"zoom": self.zoom_scale, "pan": self.pan_offset.to_dict()}
