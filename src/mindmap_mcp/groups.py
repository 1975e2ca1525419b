"""
Group braces: bounding boxes, brace geometry and label placement.

A group does not change the tree.  It only wraps its members in a curly
brace with a label node sitting at the brace's tip.  Vertical braces run
down the right-hand side of the members; horizontal ones run along the
bottom.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from mindmap_mcp.collisions import resolve_for_new_node
from mindmap_mcp.config import GroupConfig, LayoutConfig
from mindmap_mcp.graph import MindMap
from mindmap_mcp.models import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    Group,
    GroupOrientation,
    Node,
    Point,
    Rect,
)

logger = logging.getLogger("mindmap-mcp.groups")


@dataclass
class BraceGeometry:
    start: Point
    end: Point
    tip: Point

    def to_dict(self) -> dict:
        return {"start": self.start.to_dict(), "end": self.end.to_dict(), "tip": self.tip.to_dict()}


def derive_orientation(nodes: Iterable[Node], factor: float = 1.0) -> GroupOrientation:
    """Vertical when the members are spread out more vertically than horizontally."""
    nodes = list(nodes)
    if not nodes:
        return GroupOrientation.VERTICAL
    xs = [n.x for n in nodes]
    ys = [n.y for n in nodes]
    x_spread = max(xs) - min(xs)
    y_spread = max(ys) - min(ys)
    if y_spread > x_spread * factor:
        return GroupOrientation.VERTICAL
    return GroupOrientation.HORIZONTAL


def compute_bounding_box(mind_map: MindMap, group: Group) -> Optional[Rect]:
    """Union of the member rectangles, or None if no member still exists."""
    box: Optional[Rect] = None
    for node_id in group.member_node_ids:
        node = mind_map.get_node(node_id)
        if node is None:
            continue
        box = node.rect if box is None else box.union(node.rect)
    return box


def brace_geometry(
    box: Rect,
    orientation: GroupOrientation,
    config: Optional[GroupConfig] = None,
) -> BraceGeometry:
    cfg = config or GroupConfig()
    if orientation == GroupOrientation.VERTICAL:
        x = box.right + cfg.brace_offset
        return BraceGeometry(
            Point(x, box.y),
            Point(x, box.bottom),
            Point(x + cfg.tip_offset, box.cy),
        )
    y = box.bottom + cfg.brace_offset
    return BraceGeometry(
        Point(box.x, y),
        Point(box.right, y),
        Point(box.cx, y + cfg.tip_offset),
    )


def label_anchor_point(
    label_center: Point,
    brace_tip: Point,
    label_width: float = DEFAULT_WIDTH,
    label_height: float = DEFAULT_HEIGHT,
) -> Point:
    """Point near the edge of the label node where the tip line ends."""
    dx = label_center.x - brace_tip.x
    dy = label_center.y - brace_tip.y
    distance = math.hypot(dx, dy)
    if distance == 0:
        return label_center
    scale = min(label_width / 2 / max(abs(dx), 0.001), label_height / 2 / max(abs(dy), 0.001))
    clamped = min(scale * distance, distance) / distance
    return Point(label_center.x - dx * clamped * 0.9, label_center.y - dy * clamped * 0.9)


def label_position(tip: Point, orientation: GroupOrientation, label: Node,
                   config: Optional[GroupConfig] = None) -> Point:
    cfg = config or GroupConfig()
    if orientation == GroupOrientation.VERTICAL:
        return Point(tip.x + cfg.label_gap + label.width / 2, tip.y)
    return Point(tip.x, tip.y + cfg.label_gap + label.height / 2)


def group_nodes(
    mind_map: MindMap,
    members: list[Node],
    label_text: str = "",
    config: Optional[GroupConfig] = None,
    layout_config: Optional[LayoutConfig] = None,
) -> Optional[Group]:
    """Wrap *members* in a brace and create its label node beyond the tip.

    Returns None when there are no members.
    """
    cfg = config or GroupConfig()
    if not members:
        return None

    orientation = derive_orientation(members, cfg.orientation_factor)
    group = Group(member_node_ids={n.id for n in members}, orientation=orientation)
    box = compute_bounding_box(mind_map, group)
    if box is None:
        return None

    brace = brace_geometry(box, orientation, cfg)
    label = mind_map.create_node(label_text)
    label.position = label_position(brace.tip, orientation, label, cfg)
    resolve_for_new_node(mind_map, label, config=layout_config)

    group.label_node_id = label.id
    mind_map.add_group(group)
    logger.debug("Grouped %d nodes under label %s", len(members), label.id)
    return group


def ungroup(mind_map: MindMap, group: Group, delete_label: bool = False) -> None:
    mind_map.delete_group(group, delete_label=delete_label)


def group_geometry(mind_map: MindMap, group: Group, config: Optional[GroupConfig] = None) -> Optional[dict]:
    """Everything the renderer needs to draw one group."""
    box = compute_bounding_box(mind_map, group)
    if box is None:
        return None
    brace = brace_geometry(box, group.orientation, config)
    data = {"group": group.to_dict(), "bounding_box": box.to_dict(), "brace": brace.to_dict()}
    label = mind_map.get_node(group.label_node_id) if group.label_node_id else None
    if label is not None:
        data["label_anchor"] = label_anchor_point(
            label.position, brace.tip, label.width, label.height,
        ).to_dict()
    return data
