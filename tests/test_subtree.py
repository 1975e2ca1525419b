"""Tests for subtree bounds, vertical moves and mirroring."""

import random

from mindmap_mcp.graph import MindMap
from mindmap_mcp.models import Node
from mindmap_mcp.subtree import (
    compute_subtree_bounds,
    mirror_subtree,
    mirror_x,
    move_subtree,
    subtree_height,
)


def _fresh_map() -> MindMap:
    return MindMap(name="test")


def _chain(m: MindMap) -> tuple[Node, Node, Node]:
    root = m.create_node("R", 0, 0)
    child = m.create_node("C", 200, 100)
    grandchild = m.create_node("G", 400, 300)
    m.create_connection(root, child)
    m.create_connection(child, grandchild)
    return root, child, grandchild


def test_leaf_bounds_are_own_extent() -> None:
    m = _fresh_map()
    leaf = m.create_node("L", 0, 100)
    bounds = compute_subtree_bounds(m, leaf)
    assert (bounds.min_y, bounds.max_y) == (82, 118)
    assert bounds.height == 36
    assert bounds.center_y == 100


def test_bounds_include_descendants() -> None:
    m = _fresh_map()
    root, _, _ = _chain(m)
    bounds = compute_subtree_bounds(m, root)
    assert bounds.min_y == -18
    assert bounds.max_y == 318
    assert subtree_height(m, root) == 336


def test_bounds_contain_every_descendant() -> None:
    rng = random.Random(7)
    m = _fresh_map()
    nodes = [m.create_node(str(0), 0, 0)]
    for i in range(1, 40):
        parent = rng.choice(nodes)
        child = m.create_node(str(i), rng.uniform(-1000, 1000), rng.uniform(-1000, 1000),
                              rng.uniform(60, 200), rng.uniform(28, 120))
        m.create_connection(parent, child)
        nodes.append(child)

    for node in nodes:
        bounds = compute_subtree_bounds(m, node)
        members = [node, *m.iter_descendants(node)]
        for member in members:
            assert bounds.contains(member.y - member.height / 2, member.y + member.height / 2)
        assert bounds.min_y == min(n.y - n.height / 2 for n in members)
        assert bounds.max_y == max(n.y + n.height / 2 for n in members)


def test_bounds_terminate_on_cycle() -> None:
    m = _fresh_map()
    a, b = m.create_node("A", 0, 0), m.create_node("B", 0, 500)
    m.create_connection(a, b)
    m.create_connection(b, a)
    bounds = compute_subtree_bounds(m, a)
    assert bounds.max_y == 518


def test_bounds_of_very_deep_chain() -> None:
    m = _fresh_map()
    top = previous = m.create_node("0", 0, 0)
    for i in range(1, 1500):
        node = m.create_node(str(i), i * 200, i)
        m.create_connection(previous, node)
        previous = node
    bounds = compute_subtree_bounds(m, top)
    assert (bounds.min_y, bounds.max_y) == (-18, 1499 + 18)


def test_move_subtree_moves_everything() -> None:
    m = _fresh_map()
    root, child, grandchild = _chain(m)
    move_subtree(m, child, 50)
    assert root.y == 0
    assert child.y == 150
    assert grandchild.y == 350


def test_move_subtree_respects_pins() -> None:
    m = _fresh_map()
    _, child, grandchild = _chain(m)
    child.is_pinned = True
    move_subtree(m, child, -20)
    assert child.y == 100
    assert grandchild.y == 280


def test_mirror_x() -> None:
    assert mirror_x(300, 100) == -100
    assert mirror_x(100, 100) == 100
    assert mirror_x(mirror_x(123.5, 40), 40) == 123.5


def test_mirror_subtree_leaves_node_itself() -> None:
    m = _fresh_map()
    root, child, grandchild = _chain(m)
    count = mirror_subtree(m, child, root.x)
    assert count == 1
    assert child.x == 200
    assert grandchild.x == -400
