"""
Core model classes for mind maps.

Provides the geometry primitives (points, sizes, rectangles) and the three
entities a map is made of: nodes, connections and groups.  Node positions are
centre points in world coordinates.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_WIDTH = 60.0
MIN_HEIGHT = 28.0
DEFAULT_WIDTH = 100.0
DEFAULT_HEIGHT = 36.0


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class GroupOrientation(Enum):
    """Which way a group's brace runs."""
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


# ---------------------------------------------------------------------------
# Geometry primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Point:
    """A 2-D coordinate."""
    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass
class Rect:
    """Axis-aligned rectangle with a top-left origin."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_center(cls, cx: float, cy: float, width: float, height: float) -> Rect:
        return cls(cx - width / 2, cy - height / 2, width, height)

    @classmethod
    def from_points(cls, a: Point, b: Point) -> Rect:
        """Normalised rectangle spanning two corners, whatever the drag direction."""
        return cls(min(a.x, b.x), min(a.y, b.y), abs(b.x - a.x), abs(b.y - a.y))

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def cx(self) -> float:
        return self.x + self.width / 2

    @property
    def cy(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> Point:
        return Point(self.cx, self.cy)

    def intersects(self, other: Rect, margin: float = 0) -> bool:
        """Check if two rectangles overlap (touching edges do not count)."""
        return not (
            self.right + margin <= other.x
            or other.right + margin <= self.x
            or self.bottom + margin <= other.y
            or other.bottom + margin <= self.y
        )

    def contains_point(self, px: float, py: float, margin: float = 0) -> bool:
        """Check if a point is inside this rectangle (with margin)."""
        return (
            self.x - margin <= px <= self.right + margin
            and self.y - margin <= py <= self.bottom + margin
        )

    def inflate(self, dx: float, dy: float) -> Rect:
        return Rect(self.x - dx, self.y - dy, self.width + 2 * dx, self.height + 2 * dy)

    def union(self, other: Rect) -> Rect:
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return Rect(x, y, max(self.right, other.right) - x, max(self.bottom, other.bottom) - y)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextRange:
    """A character range inside a node's text (used for word anchoring)."""
    location: int
    length: int

    def fits(self, text_length: int) -> bool:
        return (
            self.location >= 0
            and self.length > 0
            and self.location + self.length <= text_length
        )


@dataclass
class Node:
    """A positioned, sized, textual mind-map node."""
    text: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    is_manually_sized: bool = False
    is_pinned: bool = False
    color: Optional[str] = None
    id: str = field(default_factory=lambda: _uid())

    def __post_init__(self) -> None:
        self.width = max(self.width, MIN_WIDTH)
        self.height = max(self.height, MIN_HEIGHT)

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    @position.setter
    def position(self, value: Point) -> None:
        self.x = value.x
        self.y = value.y

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def rect(self) -> Rect:
        return Rect.from_center(self.x, self.y, self.width, self.height)

    def resize(self, width: float, height: float, manual: bool = True) -> None:
        """Set the node size, clamped to the minimum dimensions."""
        self.width = max(width, MIN_WIDTH)
        self.height = max(height, MIN_HEIGHT)
        if manual:
            self.is_manually_sized = True

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
        if self.is_pinned:
            data["pinned"] = True
        if self.is_manually_sized:
            data["manually_sized"] = True
        if self.color:
            data["color"] = self.color
        return data


@dataclass
class Connection:
    """A directed edge from one node to another."""
    source_id: str
    target_id: str
    label: str = ""
    # Ranges of the source node's text the connection starts from
    from_ranges: Optional[tuple[TextRange, ...]] = None
    id: str = field(default_factory=lambda: _uid())

    def __post_init__(self) -> None:
        if self.from_ranges is not None:
            self.from_ranges = tuple(self.from_ranges) or None

    @property
    def is_word_anchored(self) -> bool:
        return self.from_ranges is not None

    def anchor_key(self) -> Optional[frozenset[TextRange]]:
        """The anchor-range set used to tell parallel links from duplicates."""
        if self.from_ranges is None:
            return None
        return frozenset(self.from_ranges)

    def to_dict(self) -> dict:
        data = {"id": self.id, "source": self.source_id, "target": self.target_id}
        if self.label:
            data["label"] = self.label
        if self.from_ranges:
            data["from_ranges"] = [[r.location, r.length] for r in self.from_ranges]
        return data


@dataclass
class Group:
    """A brace wrapped around a set of nodes, labelled by one node at its tip."""
    member_node_ids: set[str] = field(default_factory=set)
    label_node_id: Optional[str] = None
    orientation: GroupOrientation = GroupOrientation.VERTICAL
    id: str = field(default_factory=lambda: _uid())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "members": sorted(self.member_node_ids),
            "label_node": self.label_node_id,
            "orientation": self.orientation.value,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _uid() -> str:
    return uuid.uuid4().hex[:12]


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))
