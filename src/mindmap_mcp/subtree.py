"""
Vertical extent of whole branches, and the recursive moves layout applies
to them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mindmap_mcp.graph import MindMap
from mindmap_mcp.models import Node

logger = logging.getLogger("mindmap-mcp.subtree")


@dataclass
class SubtreeBounds:
    """Vertical span of a node together with all of its descendants."""
    min_y: float
    max_y: float

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center_y(self) -> float:
        return (self.min_y + self.max_y) / 2

    def contains(self, min_y: float, max_y: float) -> bool:
        return self.min_y <= min_y and max_y <= self.max_y

    def to_dict(self) -> dict[str, float]:
        return {"min_y": self.min_y, "max_y": self.max_y, "height": self.height}


def node_extent(node: Node) -> tuple[float, float]:
    return node.y - node.height / 2, node.y + node.height / 2


def compute_subtree_bounds(mind_map: MindMap, node: Node) -> SubtreeBounds:
    """Union the node's own extent with the extents of all its descendants.

    Walks the branch with an explicit stack, so arbitrarily deep chains are
    fine.  A node reached a second time is skipped with a warning.
    """
    seen = {node.id}
    min_y, max_y = node_extent(node)
    stack = [node]
    while stack:
        current = stack.pop()
        for child in mind_map.children_of(current):
            if child.id in seen:
                logger.warning("Cycle through node %s while measuring subtree of %s", child.id, node.id)
                continue
            seen.add(child.id)
            top, bottom = node_extent(child)
            min_y = min(min_y, top)
            max_y = max(max_y, bottom)
            stack.append(child)
    return SubtreeBounds(min_y, max_y)


def subtree_height(mind_map: MindMap, node: Node) -> float:
    return compute_subtree_bounds(mind_map, node).height


def move_subtree(mind_map: MindMap, node: Node, delta_y: float) -> None:
    """Shift a node and its descendants vertically.

    A pinned node keeps its place, but its children are still moved unless
    they are pinned themselves.
    """
    if not node.is_pinned:
        node.y += delta_y
    for child in mind_map.iter_descendants(node):
        if not child.is_pinned:
            child.y += delta_y


def mirror_x(x: float, root_x: float) -> float:
    """Reflect an X coordinate across the vertical line through the root."""
    return 2 * root_x - x


def mirror_subtree(mind_map: MindMap, node: Node, root_x: float) -> int:
    """Mirror every descendant of *node* around *root_x*.

    The node itself is left alone; the user has already placed it.
    """
    count = 0
    for child in mind_map.iter_descendants(node):
        child.x = mirror_x(child.x, root_x)
        count += 1
    return count
