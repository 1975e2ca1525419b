"""
Automatic placement for mind-map nodes.

Implements the rules a mind map grows by:
- Root balance: children of a root go to whichever side has fewer of them
- Flow rule: deeper children continue in their branch's direction
- Subtree clearing: a new child starts below the lowest branch on its side
- Fixed root: the root never moves; its children shift instead
- Trident layout: a parent sits midway between its outermost children
- Side-change mirroring: dragging a branch across the root flips its subtree
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mindmap_mcp.collisions import resolve_all_collisions, resolve_for_new_node, resolve_sibling_collisions
from mindmap_mcp.config import LayoutConfig
from mindmap_mcp.graph import MindMap
from mindmap_mcp.models import DEFAULT_HEIGHT, DEFAULT_WIDTH, Node, Point, Size
from mindmap_mcp.subtree import compute_subtree_bounds, mirror_subtree, move_subtree

logger = logging.getLogger("mindmap-mcp.layout")


class LayoutDirection(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class NodeLayoutResult:
    """Where a new child should go, and whether its side needs recentring."""
    position: Point
    direction: LayoutDirection
    parent_is_root: bool
    rebalance_needed: bool = False
    rebalance_offset: float = 0.0

    def to_dict(self) -> dict:
        return {
            "position": self.position.to_dict(),
            "direction": self.direction.value,
            "parent_is_root": self.parent_is_root,
            "rebalance_needed": self.rebalance_needed,
            "rebalance_offset": self.rebalance_offset,
        }


# ---------------------------------------------------------------------------
# Child placement
# ---------------------------------------------------------------------------

def choose_direction(mind_map: MindMap, parent: Node, siblings: list[Node]) -> LayoutDirection:
    """Pick the side a new child of *parent* grows towards."""
    if mind_map.is_root(parent):
        left = sum(1 for s in siblings if s.x < parent.x)
        right = len(siblings) - left
        # Ties go right
        return LayoutDirection.LEFT if left < right else LayoutDirection.RIGHT

    root = mind_map.root_of(parent)
    return LayoutDirection.LEFT if parent.x < root.x else LayoutDirection.RIGHT


def same_side(nodes: list[Node], parent: Node, direction: LayoutDirection) -> list[Node]:
    if direction == LayoutDirection.RIGHT:
        return [n for n in nodes if n.x >= parent.x]
    return [n for n in nodes if n.x <= parent.x]


def place_new_child(
    mind_map: MindMap,
    parent: Node,
    siblings: Optional[list[Node]] = None,
    size: Optional[Size] = None,
    config: Optional[LayoutConfig] = None,
) -> NodeLayoutResult:
    """Compute where a new child of *parent* should be placed.

    Pure: nothing in the map is modified.  *siblings* defaults to the
    parent's current children.
    """
    cfg = config or LayoutConfig()
    if siblings is None:
        siblings = mind_map.children_of(parent)
    if size is None:
        size = Size(DEFAULT_WIDTH, DEFAULT_HEIGHT)

    parent_is_root = mind_map.is_root(parent)
    direction = choose_direction(mind_map, parent, siblings)

    if direction == LayoutDirection.RIGHT:
        x = parent.x + cfg.horizontal_gap
    else:
        x = parent.x - cfg.horizontal_gap

    side = same_side(siblings, parent, direction)
    if not side:
        y = parent.y
    else:
        lowest = max(compute_subtree_bounds(mind_map, s).max_y for s in side)
        y = lowest + cfg.vertical_padding + size.height / 2

    result = NodeLayoutResult(Point(x, y), direction, parent_is_root)

    ys = [s.y for s in side] + [y]
    if len(ys) >= 2:
        offset = parent.y - (min(ys) + max(ys)) / 2
        if abs(offset) > cfg.rebalance_threshold:
            result.rebalance_needed = True
            result.rebalance_offset = offset
    return result


def apply_rebalancing(
    mind_map: MindMap,
    result: NodeLayoutResult,
    parent: Node,
    children: Optional[list[Node]] = None,
) -> bool:
    """Shift a parent or its same-side children after placing a child.

    A root stays put and its same-side child subtrees are shifted by the
    offset instead.  Any other parent is itself shifted by the offset,
    unless it is pinned.
    """
    if not result.rebalance_needed:
        return False
    if children is None:
        children = mind_map.children_of(parent)

    if result.parent_is_root:
        for child in same_side(children, parent, result.direction):
            move_subtree(mind_map, child, result.rebalance_offset)
        return True

    if parent.is_pinned:
        return False
    parent.y += result.rebalance_offset
    return True


def separate_branches(mind_map: MindMap, node: Node, config: Optional[LayoutConfig] = None) -> int:
    """Separate sibling branches at every level above *node*.

    Walks from the node's parent up to its root.  A root's children are
    handled one side at a time.  Returns the number of subtrees moved.
    """
    moved = 0
    for ancestor in mind_map.ancestors_of(node):
        children = mind_map.children_of(ancestor)
        if mind_map.is_root(ancestor):
            left = [c for c in children if c.x < ancestor.x]
            right = [c for c in children if c.x >= ancestor.x]
            moved += resolve_sibling_collisions(mind_map, left, config)
            moved += resolve_sibling_collisions(mind_map, right, config)
        else:
            moved += resolve_sibling_collisions(mind_map, children, config)
    return moved


def add_child(
    mind_map: MindMap,
    parent: Node,
    text: str = "",
    size: Optional[Size] = None,
    config: Optional[LayoutConfig] = None,
) -> Node:
    """Create, place and connect a new child of *parent* (the Tab key)."""
    cfg = config or LayoutConfig()
    if size is None:
        size = Size(DEFAULT_WIDTH, DEFAULT_HEIGHT)

    result = place_new_child(mind_map, parent, mind_map.children_of(parent), size, cfg)
    child = mind_map.create_node(text, result.position.x, result.position.y, size.width, size.height)
    mind_map.create_connection(parent, child)

    if apply_rebalancing(mind_map, result, parent):
        logger.debug("Rebalanced children of %s by %.1f", parent.id, result.rebalance_offset)
    separate_branches(mind_map, child, cfg)
    resolve_for_new_node(mind_map, child, config=cfg)
    return child


def add_sibling(
    mind_map: MindMap,
    node: Node,
    text: str = "",
    config: Optional[LayoutConfig] = None,
) -> Node:
    """Create a sibling of *node* (the Enter key).

    With a parent, this is a new child of that parent.  A free-standing node
    gets an unconnected neighbour below it.
    """
    cfg = config or LayoutConfig()
    parent = mind_map.parent_of(node)
    if parent is not None:
        return add_child(mind_map, parent, text, Size(node.width, node.height), cfg)

    sibling = mind_map.create_node(text, node.x, node.y + cfg.sibling_offset_y)
    resolve_for_new_node(mind_map, sibling, config=cfg)
    return sibling


# ---------------------------------------------------------------------------
# Trident layout
# ---------------------------------------------------------------------------

def centered_parent_y(mind_map: MindMap, parent: Node) -> Optional[float]:
    """Midpoint between the highest and lowest direct children, if any."""
    children = mind_map.children_of(parent)
    if not children:
        return None
    ys = sorted(c.y for c in children)
    return (ys[0] + ys[-1]) / 2


def center_parent_over_children(
    mind_map: MindMap,
    parent: Node,
    config: Optional[LayoutConfig] = None,
) -> bool:
    """Centre *parent* between its outermost children.

    For a root the children move by the opposite amount instead.  Returns
    True when anything moved.
    """
    cfg = config or LayoutConfig()
    target = centered_parent_y(mind_map, parent)
    if target is None:
        return False
    delta = target - parent.y
    if abs(delta) <= cfg.trident_threshold:
        return False

    if mind_map.is_root(parent):
        for child in mind_map.children_of(parent):
            move_subtree(mind_map, child, -delta)
        return True
    if parent.is_pinned:
        return False
    parent.y = target
    return True


def apply_trident_recursively(
    mind_map: MindMap,
    node: Node,
    config: Optional[LayoutConfig] = None,
) -> None:
    """Centre every parent in the subtree of *node*, deepest first."""
    order = [node]
    order.extend(mind_map.iter_descendants(node))
    # Reversed pre-order visits every child before its parent
    for current in reversed(order):
        center_parent_over_children(mind_map, current, config)


def rebalance_tree(mind_map: MindMap, config: Optional[LayoutConfig] = None) -> int:
    """Trident-centre every tree, then relax collisions globally.

    Returns the number of nodes still overlapping afterwards.
    """
    for root in mind_map.roots():
        apply_trident_recursively(mind_map, root, config)
    return resolve_all_collisions(mind_map, config)


# ---------------------------------------------------------------------------
# After a manual drag
# ---------------------------------------------------------------------------

def check_and_mirror(mind_map: MindMap, moved: Node, previous_x: float) -> bool:
    """Mirror the descendants of *moved* if the drag took it across the root."""
    root = mind_map.root_of(moved)
    if root.id == moved.id:
        return False
    was_left = previous_x < root.x
    is_left = moved.x < root.x
    if was_left == is_left:
        return False
    count = mirror_subtree(mind_map, moved, root.x)
    logger.debug("Node %s changed side; mirrored %d descendants", moved.id, count)
    return True


def reflow(mind_map: MindMap, moved: Node, config: Optional[LayoutConfig] = None) -> bool:
    """Tidy the layout around a node the user has just moved.

    Re-centres every ancestor, separates the node's sibling branches and
    finally pushes the node itself clear of anything it still overlaps.
    Returns whether the moved node ended up collision free.
    """
    cfg = config or LayoutConfig()
    for ancestor in mind_map.ancestors_of(moved):
        center_parent_over_children(mind_map, ancestor, cfg)

    parent = mind_map.parent_of(moved)
    if parent is not None:
        resolve_sibling_collisions(mind_map, mind_map.children_of(parent), cfg)

    return resolve_for_new_node(mind_map, moved, config=cfg)
