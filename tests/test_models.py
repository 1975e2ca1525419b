"""Tests for the mind-map model classes."""

from mindmap_mcp.models import (
    MIN_HEIGHT,
    MIN_WIDTH,
    Connection,
    Group,
    GroupOrientation,
    Node,
    Point,
    Rect,
    TextRange,
    clamp,
)


def test_point_arithmetic() -> None:
    a = Point(10, 20)
    b = Point(3, 4)
    assert a + b == Point(13, 24)
    assert a - b == Point(7, 16)
    assert b.scaled(2) == Point(6, 8)
    assert Point(0, 0).distance_to(b) == 5


def test_rect_properties() -> None:
    r = Rect(10, 20, 100, 50)
    assert r.right == 110
    assert r.bottom == 70
    assert r.cx == 60
    assert r.cy == 45
    assert r.center == Point(60, 45)


def test_rect_from_center() -> None:
    r = Rect.from_center(50, 50, 100, 36)
    assert r.x == 0
    assert r.y == 32
    assert r.center == Point(50, 50)


def test_rect_from_points_normalises_drag_direction() -> None:
    r = Rect.from_points(Point(100, 80), Point(20, 10))
    assert (r.x, r.y, r.width, r.height) == (20, 10, 80, 70)


def test_rect_intersects() -> None:
    a = Rect(0, 0, 100, 50)
    assert a.intersects(Rect(50, 25, 100, 50))
    assert not a.intersects(Rect(200, 0, 10, 10))
    # Touching edges do not count
    assert not a.intersects(Rect(100, 0, 50, 50))


def test_rect_contains_point() -> None:
    r = Rect(0, 0, 100, 50)
    assert r.contains_point(50, 25)
    assert r.contains_point(0, 0)
    assert not r.contains_point(101, 25)
    assert r.contains_point(101, 25, margin=2)


def test_rect_union_and_inflate() -> None:
    u = Rect(0, 0, 10, 10).union(Rect(20, 5, 10, 10))
    assert (u.x, u.y, u.right, u.bottom) == (0, 0, 30, 15)
    grown = Rect(10, 10, 10, 10).inflate(5, 2)
    assert (grown.x, grown.y, grown.width, grown.height) == (5, 8, 20, 14)


def test_node_defaults() -> None:
    node = Node(text="Idea")
    assert node.width == 100
    assert node.height == 36
    assert not node.is_pinned
    assert not node.is_manually_sized
    assert len(node.id) == 12


def test_node_ids_are_unique() -> None:
    assert Node().id != Node().id


def test_node_minimum_size_on_construction() -> None:
    node = Node(width=10, height=5)
    assert node.width == MIN_WIDTH
    assert node.height == MIN_HEIGHT


def test_node_resize_clamps_and_marks_manual() -> None:
    node = Node()
    node.resize(20, 200)
    assert node.width == MIN_WIDTH
    assert node.height == 200
    assert node.is_manually_sized


def test_node_position_setter() -> None:
    node = Node(x=1, y=2)
    assert node.position == Point(1, 2)
    node.position = Point(30, 40)
    assert (node.x, node.y) == (30, 40)


def test_node_rect_is_centred() -> None:
    node = Node(x=100, y=100, width=100, height=36)
    assert node.rect.x == 50
    assert node.rect.y == 82


def test_node_to_dict() -> None:
    node = Node(text="A", x=1, y=2)
    data = node.to_dict()
    assert data["text"] == "A"
    assert "pinned" not in data
    node.is_pinned = True
    node.color = "#ff0000"
    data = node.to_dict()
    assert data["pinned"] is True
    assert data["color"] == "#ff0000"


def test_text_range_fits() -> None:
    assert TextRange(0, 5).fits(5)
    assert not TextRange(3, 5).fits(5)
    assert not TextRange(0, 0).fits(5)
    assert not TextRange(-1, 2).fits(5)


def test_connection_empty_ranges_become_none() -> None:
    conn = Connection("a", "b", from_ranges=())
    assert conn.from_ranges is None
    assert not conn.is_word_anchored
    assert conn.anchor_key() is None


def test_connection_anchor_key_ignores_order() -> None:
    a = Connection("a", "b", from_ranges=(TextRange(0, 2), TextRange(4, 3)))
    b = Connection("a", "b", from_ranges=(TextRange(4, 3), TextRange(0, 2)))
    assert a.is_word_anchored
    assert a.anchor_key() == b.anchor_key()


def test_connection_to_dict() -> None:
    conn = Connection("a", "b", label="why", from_ranges=(TextRange(1, 3),))
    data = conn.to_dict()
    assert data["source"] == "a"
    assert data["target"] == "b"
    assert data["label"] == "why"
    assert data["from_ranges"] == [[1, 3]]


def test_group_to_dict() -> None:
    group = Group(member_node_ids={"b", "a"}, label_node_id="l",
                  orientation=GroupOrientation.HORIZONTAL)
    data = group.to_dict()
    assert data["members"] == ["a", "b"]
    assert data["orientation"] == "horizontal"


def test_clamp() -> None:
    assert clamp(5, 0, 10) == 5
    assert clamp(-1, 0, 10) == 0
    assert clamp(11, 0, 10) == 10
