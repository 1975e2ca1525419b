"""
Collision detection and vertical repulsion between nodes.

Every node is treated as its rectangle grown by half the collision padding on
each side, so two nodes count as overlapping when they come closer than the
padding.  Nodes are only ever pushed up or down.  Pinned nodes are never
moved; they stay in place as obstacles for everyone else.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from mindmap_mcp.config import LayoutConfig
from mindmap_mcp.graph import MindMap
from mindmap_mcp.models import Node, Rect
from mindmap_mcp.subtree import compute_subtree_bounds, move_subtree

logger = logging.getLogger("mindmap-mcp.collisions")


def node_rect(node: Node, padding: float = 20) -> Rect:
    """Padded rectangle used for collision tests."""
    return Rect.from_center(node.x, node.y, node.width + padding, node.height + padding)


def nodes_overlap(a: Node, b: Node, padding: float = 20) -> bool:
    return node_rect(a, padding).intersects(node_rect(b, padding))


def find_overlapping_nodes(node: Node, nodes: Iterable[Node], padding: float = 20) -> list[Node]:
    return [other for other in nodes if other.id != node.id and nodes_overlap(node, other, padding)]


def repulsion_delta(moving: Node, static: Node, padding: float = 20) -> float:
    """Vertical shift that clears *moving* from *static* by a further *padding*.

    Negative values push up (moving sits above), positive values push down.
    Returns 0 when the two do not overlap.
    """
    moving_rect = node_rect(moving, padding)
    static_rect = node_rect(static, padding)
    if not moving_rect.intersects(static_rect):
        return 0.0
    if moving.y < static.y:
        return (static_rect.y - moving_rect.bottom) - padding
    return (static_rect.bottom - moving_rect.y) + padding


def resolve_for_new_node(
    mind_map: MindMap,
    node: Node,
    max_attempts: Optional[int] = None,
    config: Optional[LayoutConfig] = None,
) -> bool:
    """Push *node* up or down until it overlaps nothing.

    Each round applies the single largest repulsion among the current
    overlaps.  Gives up after *max_attempts* rounds, logging a warning and
    leaving the layout as it is.  Returns True when the node ends up clear.
    """
    cfg = config or LayoutConfig()
    attempts = max_attempts if max_attempts is not None else cfg.max_collision_attempts
    padding = cfg.collision_padding

    if node.is_pinned:
        return not find_overlapping_nodes(node, mind_map.nodes.values(), padding)

    for _ in range(attempts):
        overlapping = find_overlapping_nodes(node, mind_map.nodes.values(), padding)
        if not overlapping:
            return True

        best = 0.0
        for other in overlapping:
            delta = repulsion_delta(node, other, padding)
            if abs(delta) > abs(best):
                best = delta

        if best != 0:
            node.y += best
        else:
            node.y += cfg.vertical_padding + node.height

    if not find_overlapping_nodes(node, mind_map.nodes.values(), padding):
        return True
    logger.warning(
        "Could not resolve collisions for node %s after %d attempts", node.id, attempts,
    )
    return False


def resolve_sibling_collisions(
    mind_map: MindMap,
    siblings: list[Node],
    config: Optional[LayoutConfig] = None,
) -> int:
    """Separate neighbouring sibling branches, top to bottom.

    When the upper sibling's subtree reaches into the lower one's (plus
    padding), the whole lower subtree is shifted down by the overlap.
    Returns the number of subtrees moved.
    """
    cfg = config or LayoutConfig()
    if len(siblings) < 2:
        return 0

    moved = 0
    ordered = sorted(siblings, key=lambda n: n.y)
    for upper, lower in zip(ordered, ordered[1:]):
        upper_bounds = compute_subtree_bounds(mind_map, upper)
        lower_bounds = compute_subtree_bounds(mind_map, lower)
        overlap = upper_bounds.max_y + cfg.collision_padding - lower_bounds.min_y
        if overlap > 0:
            move_subtree(mind_map, lower, overlap)
            moved += 1
    return moved


def resolve_all_collisions(mind_map: MindMap, config: Optional[LayoutConfig] = None) -> int:
    """One top-to-bottom relaxation pass over every node.

    Returns the number of nodes that still overlap something afterwards.
    """
    cfg = config or LayoutConfig()
    unresolved = 0
    for node in sorted(mind_map.nodes.values(), key=lambda n: n.y):
        if not resolve_for_new_node(mind_map, node, cfg.global_collision_attempts, cfg):
            unresolved += 1
    return unresolved


def find_overlapping_pairs(mind_map: MindMap, padding: float = 20) -> list[tuple[str, str]]:
    """Return all pairs of node ids whose padded rectangles overlap."""
    nodes = list(mind_map.nodes.values())
    pairs: list[tuple[str, str]] = []
    for i, a in enumerate(nodes):
        for b in nodes[i + 1:]:
            if nodes_overlap(a, b, padding):
                pairs.append((a.id, b.id))
    return pairs
