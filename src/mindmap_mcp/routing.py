"""
Bezier routing for connections.

Connections leave and enter nodes at the midpoint of a side (never a corner),
bend in an S-curve whose reach grows with distance, fan out slightly when a
node has several outgoing links, and detour above or below any node lying
in their straight corridor.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Union

from mindmap_mcp.config import RoutingConfig
from mindmap_mcp.graph import MindMap
from mindmap_mcp.models import Connection, Node, Point, Rect, Size, TextRange, clamp

logger = logging.getLogger("mindmap-mcp.routing")


# ---------------------------------------------------------------------------
# Path segments
# ---------------------------------------------------------------------------

@dataclass
class CubicSegment:
    start: Point
    control1: Point
    control2: Point
    end: Point

    def point_at(self, t: float) -> Point:
        mt = 1 - t
        a, b, c, d = mt ** 3, 3 * mt * mt * t, 3 * mt * t * t, t ** 3
        return Point(
            a * self.start.x + b * self.control1.x + c * self.control2.x + d * self.end.x,
            a * self.start.y + b * self.control1.y + c * self.control2.y + d * self.end.y,
        )

    def to_dict(self) -> dict:
        return {
            "type": "cubic",
            "start": self.start.to_dict(),
            "control1": self.control1.to_dict(),
            "control2": self.control2.to_dict(),
            "end": self.end.to_dict(),
        }


@dataclass
class QuadSegment:
    start: Point
    control: Point
    end: Point

    def point_at(self, t: float) -> Point:
        mt = 1 - t
        a, b, c = mt * mt, 2 * mt * t, t * t
        return Point(
            a * self.start.x + b * self.control.x + c * self.end.x,
            a * self.start.y + b * self.control.y + c * self.end.y,
        )

    def to_dict(self) -> dict:
        return {
            "type": "quad",
            "start": self.start.to_dict(),
            "control": self.control.to_dict(),
            "end": self.end.to_dict(),
        }


Segment = Union[CubicSegment, QuadSegment]


@dataclass
class ConnectionPath:
    """A connection curve ready for the renderer."""
    segments: list[Segment] = field(default_factory=list)
    bypass: bool = False

    @property
    def start(self) -> Point:
        return self.segments[0].start

    @property
    def end(self) -> Point:
        return self.segments[-1].end

    def label_position(self) -> Point:
        """Where the connection's label sits: the curve midpoint."""
        if len(self.segments) == 1:
            return self.segments[0].point_at(0.5)
        return self.segments[0].end

    def to_dict(self) -> dict:
        return {
            "segments": [s.to_dict() for s in self.segments],
            "bypass": self.bypass,
            "label_position": self.label_position().to_dict(),
        }


def bezier_midpoint(start: Point, control1: Point, control2: Point, end: Point) -> Point:
    """Cubic Bezier point at t=0.5."""
    return CubicSegment(start, control1, control2, end).point_at(0.5)


# ---------------------------------------------------------------------------
# Anchors and control points
# ---------------------------------------------------------------------------

def cardinal_anchors(
    source_center: Point,
    source_size: Size,
    target_center: Point,
    target_size: Size,
) -> tuple[Point, Point]:
    """Side midpoints facing each other along the dominant axis."""
    dx = target_center.x - source_center.x
    dy = target_center.y - source_center.y
    sw, sh = source_size.width / 2, source_size.height / 2
    tw, th = target_size.width / 2, target_size.height / 2

    if abs(dx) > abs(dy):
        if dx > 0:
            return (Point(source_center.x + sw, source_center.y),
                    Point(target_center.x - tw, target_center.y))
        return (Point(source_center.x - sw, source_center.y),
                Point(target_center.x + tw, target_center.y))
    if dy > 0:
        return (Point(source_center.x, source_center.y + sh),
                Point(target_center.x, target_center.y - th))
    return (Point(source_center.x, source_center.y - sh),
            Point(target_center.x, target_center.y + th))


def control_reach(distance: float, config: Optional[RoutingConfig] = None) -> float:
    cfg = config or RoutingConfig()
    return clamp(distance * cfg.reach_factor, cfg.min_reach, cfg.max_reach)


def control_points(
    start: Point,
    end: Point,
    config: Optional[RoutingConfig] = None,
) -> tuple[Point, Point]:
    dx = end.x - start.x
    dy = end.y - start.y
    reach = control_reach(math.hypot(dx, dy), config)
    if abs(dx) > abs(dy):
        sign = 1 if dx > 0 else -1
        return Point(start.x + reach * sign, start.y), Point(end.x - reach * sign, end.y)
    sign = 1 if dy > 0 else -1
    return Point(start.x, start.y + reach * sign), Point(end.x, end.y - reach * sign)


def create_connection_path(
    source_center: Point,
    source_size: Size,
    target_center: Point,
    target_size: Size,
    config: Optional[RoutingConfig] = None,
) -> ConnectionPath:
    """Plain S-curve between two nodes."""
    start, end = cardinal_anchors(source_center, source_size, target_center, target_size)
    c1, c2 = control_points(start, end, config)
    return ConnectionPath([CubicSegment(start, c1, c2, end)])


def exit_offset(child_index: int, total_children: int, config: Optional[RoutingConfig] = None) -> float:
    """Perpendicular nudge of the first control point, spread across siblings."""
    cfg = config or RoutingConfig()
    if total_children <= 1:
        return 0.0
    return (child_index / (total_children - 1) - 0.5) * cfg.exit_spread


def create_dynamic_connection_path(
    source_center: Point,
    source_size: Size,
    target_center: Point,
    target_size: Size,
    child_index: int = 0,
    total_children: int = 1,
    config: Optional[RoutingConfig] = None,
) -> ConnectionPath:
    """S-curve that fans out per child and reaches further for distant targets.

    The reach grows by up to ``dy_extension`` as the perpendicular distance
    approaches ``dy_normaliser``, so long diagonal links do not cut
    through the nodes in between.
    """
    cfg = config or RoutingConfig()
    start, end = cardinal_anchors(source_center, source_size, target_center, target_size)
    dx = end.x - start.x
    dy = end.y - start.y
    # Axis picked from the centres, as in cardinal_anchors
    horizontal = abs(target_center.x - source_center.x) > abs(target_center.y - source_center.y)

    perpendicular = abs(dy) if horizontal else abs(dx)
    factor = min(perpendicular / cfg.dy_normaliser, 1.0)
    reach = control_reach(math.hypot(dx, dy), cfg) * (1 + cfg.dy_extension * factor)
    nudge = exit_offset(child_index, total_children, cfg)

    if horizontal:
        sign = 1 if dx > 0 else -1
        c1 = Point(start.x + reach * sign, start.y + nudge)
        c2 = Point(end.x - reach * sign, end.y)
    else:
        sign = 1 if dy > 0 else -1
        c1 = Point(start.x + nudge, start.y + reach * sign)
        c2 = Point(end.x, end.y - reach * sign)
    return ConnectionPath([CubicSegment(start, c1, c2, end)])


# ---------------------------------------------------------------------------
# Obstacle bypass
# ---------------------------------------------------------------------------

def find_obstructing_nodes(
    start: Point,
    end: Point,
    nodes: list[Node],
    exclude: set[str],
    config: Optional[RoutingConfig] = None,
) -> list[Node]:
    """Nodes intersecting the straight corridor between two anchors."""
    cfg = config or RoutingConfig()
    corridor = Rect(
        min(start.x, end.x),
        min(start.y, end.y) - cfg.corridor_padding,
        abs(end.x - start.x),
        abs(end.y - start.y) + 2 * cfg.corridor_padding,
    )
    return [n for n in nodes if n.id not in exclude and n.rect.intersects(corridor)]


def bypass_y(start: Point, end: Point, obstacles: list[Node], config: Optional[RoutingConfig] = None) -> float:
    """Height of the detour: just above or just below the obstacle cluster,
    whichever edge is nearer to the straight line's midpoint."""
    cfg = config or RoutingConfig()
    top = min(n.y - n.height / 2 for n in obstacles)
    bottom = max(n.y + n.height / 2 for n in obstacles)
    mid = (start.y + end.y) / 2
    if abs(mid - top) < abs(mid - bottom):
        return top - cfg.bypass_margin
    return bottom + cfg.bypass_margin


def bypass_x(start: Point, end: Point, obstacles: list[Node], config: Optional[RoutingConfig] = None) -> float:
    """Same as :func:`bypass_y` for vertical links: left or right of the cluster."""
    cfg = config or RoutingConfig()
    left = min(n.x - n.width / 2 for n in obstacles)
    right = max(n.x + n.width / 2 for n in obstacles)
    mid = (start.x + end.x) / 2
    if abs(mid - left) < abs(mid - right):
        return left - cfg.bypass_margin
    return right + cfg.bypass_margin


def create_bypass_path(
    start: Point,
    end: Point,
    detour: float,
    config: Optional[RoutingConfig] = None,
    horizontal: bool = True,
) -> ConnectionPath:
    """Two quadratic segments meeting at the detour point.

    *detour* is a Y coordinate for horizontal links and an X coordinate for
    vertical ones.
    """
    cfg = config or RoutingConfig()
    if horizontal:
        mid = Point((start.x + end.x) / 2, detour)
        reach = abs(end.x - start.x) * cfg.bypass_reach_factor
        sign = 1 if end.x >= start.x else -1
        c1 = Point(start.x + reach * sign, start.y)
        c2 = Point(end.x - reach * sign, end.y)
    else:
        mid = Point(detour, (start.y + end.y) / 2)
        reach = abs(end.y - start.y) * cfg.bypass_reach_factor
        sign = 1 if end.y >= start.y else -1
        c1 = Point(start.x, start.y + reach * sign)
        c2 = Point(end.x, end.y - reach * sign)
    return ConnectionPath([QuadSegment(start, c1, mid), QuadSegment(mid, c2, end)], bypass=True)


# ---------------------------------------------------------------------------
# Word anchoring
# ---------------------------------------------------------------------------

def resolve_anchor_ranges(connection: Connection, text: str) -> Optional[tuple[TextRange, ...]]:
    """Anchor ranges that still fit *text*, or None to anchor on the whole node."""
    if not connection.from_ranges:
        return None
    valid = tuple(r for r in connection.from_ranges if r.fits(len(text)))
    return valid or None


def source_anchor(
    node: Node,
    connection: Connection,
    word_rect: Optional[Rect] = None,
) -> tuple[Point, Size]:
    """Where a connection starts, and the size used for side anchoring.

    For a resolvable word anchor this is the bottom-centre of the word's
    rectangle (given in node-local coordinates).  Anything else falls back
    to the whole node.
    """
    if word_rect is None or resolve_anchor_ranges(connection, node.text) is None:
        return node.position, node.size
    left = node.x - node.width / 2
    top = node.y - node.height / 2
    return Point(left + word_rect.cx, top + word_rect.bottom), Size(word_rect.width, word_rect.height)


# ---------------------------------------------------------------------------
# Connection routing
# ---------------------------------------------------------------------------

def route_connection(
    mind_map: MindMap,
    connection: Connection,
    word_rect: Optional[Rect] = None,
    config: Optional[RoutingConfig] = None,
) -> Optional[ConnectionPath]:
    """Compute the curve the renderer should draw for *connection*."""
    cfg = config or RoutingConfig()
    source = mind_map.get_node(connection.source_id)
    target = mind_map.get_node(connection.target_id)
    if source is None or target is None:
        logger.debug("Connection %s has a missing endpoint", connection.id)
        return None

    origin, origin_size = source_anchor(source, connection, word_rect)
    start, end = cardinal_anchors(origin, origin_size, target.position, target.size)

    obstacles = find_obstructing_nodes(
        start, end, list(mind_map.nodes.values()), {source.id, target.id}, cfg,
    )
    if obstacles:
        if abs(end.x - start.x) > abs(end.y - start.y):
            return create_bypass_path(start, end, bypass_y(start, end, obstacles, cfg), cfg)
        return create_bypass_path(
            start, end, bypass_x(start, end, obstacles, cfg), cfg, horizontal=False,
        )

    siblings = mind_map.outgoing(source)
    index = next((i for i, c in enumerate(siblings) if c.id == connection.id), 0)
    return create_dynamic_connection_path(
        origin, origin_size, target.position, target.size, index, len(siblings), cfg,
    )


def route_all(
    mind_map: MindMap,
    config: Optional[RoutingConfig] = None,
) -> dict[str, ConnectionPath]:
    paths: dict[str, ConnectionPath] = {}
    for conn in mind_map.connections.values():
        path = route_connection(mind_map, conn, config=config)
        if path is not None:
            paths[conn.id] = path
    return paths
