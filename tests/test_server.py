"""Tests for the MCP server tools (5-tool architecture)."""

import json

import pytest

from mindmap_mcp.server import _maps, canvas, edit, inspect, layout, view


@pytest.fixture(autouse=True)
def _clear_maps() -> None:
    """Clear maps between tests."""
    _maps.clear()


def _map_with_root(name: str = "m") -> str:
    created = json.loads(canvas(action="create", name=name, root_text="Root"))
    return created["root_id"]


def _nodes(name: str = "m") -> dict[str, dict]:
    return {n["id"]: n for n in json.loads(inspect(action="nodes", map_name=name))}


# ===================================================================
# canvas
# ===================================================================

class TestCanvas:
    """Map lifecycle."""

    def test_create_with_root(self) -> None:
        root_id = _map_with_root()
        root = _nodes()[root_id]
        assert (root["x"], root["y"]) == (5000, 5000)

    def test_create_centres_viewport_on_root(self) -> None:
        _map_with_root()
        screen = json.loads(view(action="world_to_screen", map_name="m", x=5000, y=5000))
        assert screen == {"x": 640, "y": 400}

    def test_create_without_root(self) -> None:
        created = json.loads(canvas(action="create", name="empty"))
        assert "root_id" not in created
        assert json.loads(inspect(action="nodes", map_name="empty")) == []

    def test_list(self) -> None:
        _map_with_root("a")
        canvas(action="create", name="b")
        listing = json.loads(canvas(action="list"))
        assert {m["name"]: m["nodes"] for m in listing} == {"a": 1, "b": 0}

    def test_delete(self) -> None:
        _map_with_root()
        assert "deleted" in canvas(action="delete", name="m")
        assert "not found" in canvas(action="delete", name="m")

    def test_snapshot(self) -> None:
        root_id = _map_with_root()
        data = json.loads(canvas(action="snapshot", name="m"))
        assert data["nodes"][0]["id"] == root_id
        assert data["connections"] == []
        assert data["interaction"]["state"] == "idle"


# ===================================================================
# edit + layout
# ===================================================================

class TestEdit:
    """Building maps through the edit tool."""

    def test_three_children_are_balanced(self) -> None:
        root_id = _map_with_root()
        ids = [json.loads(edit(action="add_child", map_name="m", node_id=root_id, text=t))["id"]
               for t in ("one", "two", "three")]
        nodes = _nodes()
        c1, c2, c3 = (nodes[i] for i in ids)
        assert (c1["x"], c1["y"]) == (5200, 4962)
        assert (c2["x"], c2["y"]) == (4800, 5000)
        assert (c3["x"], c3["y"]) == (5200, 5038)
        assert nodes[root_id]["y"] == 5000
        assert "No overlaps" in inspect(action="overlaps", map_name="m")

    def test_add_sibling(self) -> None:
        root_id = _map_with_root()
        child = json.loads(edit(action="add_child", map_name="m", node_id=root_id))
        sibling = json.loads(edit(action="add_sibling", map_name="m", node_id=child["id"]))
        conns = json.loads(inspect(action="connections", map_name="m"))
        assert {c["target"] for c in conns if c["source"] == root_id} == {child["id"], sibling["id"]}

    def test_add_node_with_size_and_color(self) -> None:
        canvas(action="create", name="m")
        node = json.loads(edit(action="add_node", map_name="m", text="Free", x=10, y=20,
                               width=200, height=50, color="#336699"))
        assert (node["width"], node["height"]) == (200, 50)
        assert node["color"] == "#336699"

    def test_move_node_across_root_mirrors(self) -> None:
        root_id = _map_with_root()
        child = json.loads(edit(action="add_child", map_name="m", node_id=root_id))
        grand = json.loads(edit(action="add_child", map_name="m", node_id=child["id"]))
        assert grand["x"] == 5400

        result = json.loads(edit(action="move_node", map_name="m", node_id=child["id"],
                                 x=4800, y=5000))

        assert result["mirrored"] is True
        assert _nodes()[grand["id"]]["x"] == 4600

    def test_resize_clamps(self) -> None:
        root_id = _map_with_root()
        node = json.loads(edit(action="resize_node", map_name="m", node_id=root_id,
                               width=10, height=10))
        assert (node["width"], node["height"]) == (60, 28)
        assert node["manually_sized"] is True

    def test_set_text_and_pin(self) -> None:
        root_id = _map_with_root()
        edit(action="set_text", map_name="m", node_id=root_id, text="Topic")
        assert "pinned" in edit(action="pin", map_name="m", node_id=root_id)
        root = _nodes()[root_id]
        assert root["text"] == "Topic"
        assert root["pinned"] is True

    def test_connect_disconnect_and_label(self) -> None:
        canvas(action="create", name="m")
        a = json.loads(edit(action="add_node", map_name="m", text="hello world", x=0, y=0))
        b = json.loads(edit(action="add_node", map_name="m", text="B", x=300, y=0))
        conn = json.loads(edit(action="connect", map_name="m", node_id=a["id"],
                               target_id=b["id"], ranges=[[6, 5]]))
        assert conn["from_ranges"] == [[6, 5]]

        # Same anchor again is a duplicate
        dup = edit(action="connect", map_name="m", node_id=a["id"], target_id=b["id"],
                   ranges=[[6, 5]])
        assert dup.startswith("Error:")

        edit(action="set_label", map_name="m", connection_id=conn["id"], label="why")
        conns = json.loads(inspect(action="connections", map_name="m"))
        assert conns[0]["label"] == "why"

        assert "deleted" in edit(action="disconnect", map_name="m", connection_id=conn["id"])
        assert json.loads(inspect(action="connections", map_name="m")) == []

    def test_self_loop_rejected(self) -> None:
        root_id = _map_with_root()
        result = edit(action="connect", map_name="m", node_id=root_id, target_id=root_id)
        assert result.startswith("Error:")

    def test_delete_node_cascades(self) -> None:
        root_id = _map_with_root()
        child = json.loads(edit(action="add_child", map_name="m", node_id=root_id))
        result = edit(action="delete_node", map_name="m", node_id=root_id)
        assert "1 connection" in result
        assert list(_nodes()) == [child["id"]]

    def test_group_and_ungroup(self) -> None:
        canvas(action="create", name="m")
        a = json.loads(edit(action="add_node", map_name="m", text="A", x=0, y=0))
        b = json.loads(edit(action="add_node", map_name="m", text="B", x=0, y=200))
        group = json.loads(edit(action="group", map_name="m", node_ids=[a["id"], b["id"]],
                                text="Pros"))
        assert group["orientation"] == "vertical"

        geometry = json.loads(inspect(action="groups", map_name="m"))
        assert geometry[0]["brace"]["tip"] == {"x": 78, "y": 100}

        edit(action="ungroup", map_name="m", group_id=group["id"], delete_label=True)
        assert json.loads(inspect(action="groups", map_name="m")) == []
        assert group["label_node"] not in _nodes()


class TestLayoutTool:
    """Explicit layout actions."""

    def test_preview_child_does_not_create(self) -> None:
        root_id = _map_with_root()
        preview = json.loads(layout(action="preview_child", map_name="m", node_id=root_id))
        assert preview["position"] == {"x": 5200, "y": 5000}
        assert preview["direction"] == "right"
        assert len(_nodes()) == 1

    def test_center_parent_recursive(self) -> None:
        canvas(action="create", name="m")
        r = json.loads(edit(action="add_node", map_name="m", text="R", x=0, y=0))
        p = json.loads(edit(action="add_node", map_name="m", text="P", x=200, y=0))
        a = json.loads(edit(action="add_node", map_name="m", text="A", x=400, y=100))
        b = json.loads(edit(action="add_node", map_name="m", text="B", x=400, y=300))
        for src, dst in ((r, p), (p, a), (p, b)):
            edit(action="connect", map_name="m", node_id=src["id"], target_id=dst["id"])

        layout(action="center_parent", map_name="m", node_id=r["id"], recursive=True)

        nodes = _nodes()
        assert nodes[r["id"]]["y"] == 0
        assert nodes[p["id"]]["y"] == 0
        assert (nodes[a["id"]]["y"], nodes[b["id"]]["y"]) == (-100, 100)

    def test_rebalance_tree(self) -> None:
        root_id = _map_with_root()
        for _ in range(4):
            edit(action="add_child", map_name="m", node_id=root_id)
        result = json.loads(layout(action="rebalance_tree", map_name="m"))
        assert result == {"unresolved": 0}

    def test_resolve_collisions_for_one_node(self) -> None:
        canvas(action="create", name="m")
        edit(action="add_node", map_name="m", text="A", x=0, y=0)
        b = json.loads(edit(action="add_node", map_name="m", text="B", x=0, y=10))
        result = json.loads(layout(action="resolve_collisions", map_name="m", node_id=b["id"]))
        assert result["collision_free"] is True
        assert result["node"]["y"] == 76

    def test_resolve_collisions_globally(self) -> None:
        canvas(action="create", name="m")
        edit(action="add_node", map_name="m", text="A", x=0, y=0)
        edit(action="add_node", map_name="m", text="B", x=0, y=10)
        result = json.loads(layout(action="resolve_collisions", map_name="m"))
        assert result == {"unresolved": 0}


# ===================================================================
# view
# ===================================================================

class TestView:
    """Viewport and gestures through the view tool."""

    def test_zoom_keeps_anchor(self) -> None:
        _map_with_root()
        before = json.loads(view(action="screen_to_world", map_name="m", x=100, y=100))
        state = json.loads(view(action="zoom", map_name="m", x=100, y=100, factor=2.0))
        assert state["changed"] is True
        assert state["viewport"]["zoom"] == 2.0
        after = json.loads(view(action="screen_to_world", map_name="m", x=100, y=100))
        assert abs(after["x"] - before["x"]) < 1e-6
        assert abs(after["y"] - before["y"]) < 1e-6

    def test_pan(self) -> None:
        _map_with_root()
        view(action="pan", map_name="m", dx=10, dy=-5)
        screen = json.loads(view(action="world_to_screen", map_name="m", x=5000, y=5000))
        assert screen == {"x": 650, "y": 395}

    def test_center_on(self) -> None:
        _map_with_root()
        view(action="center_on", map_name="m", x=0, y=0)
        screen = json.loads(view(action="world_to_screen", map_name="m", x=0, y=0))
        assert screen == {"x": 640, "y": 400}

    def test_tab_key_adds_child_of_tapped_node(self) -> None:
        root_id = _map_with_root()
        state = json.loads(view(action="tap", map_name="m", x=640, y=400))
        assert state["selected_nodes"] == [root_id]

        state = json.loads(view(action="key", map_name="m", key="tab"))
        child = state["created"]
        assert (child["x"], child["y"]) == (5200, 5000)

        intents = json.loads(inspect(action="intents", map_name="m"))
        assert intents == [{"type": "EditNodeIntent", "node_id": child["id"]}]
        assert json.loads(inspect(action="intents", map_name="m")) == []

    def test_double_tap_creates_node(self) -> None:
        _map_with_root()
        state = json.loads(view(action="tap", map_name="m", x=100, y=100, count=2))
        assert state["created"]["x"] == 5000 - 540
        assert state["created"]["y"] == 5000 - 300

    def test_shift_drag_links_nodes(self) -> None:
        root_id = _map_with_root()
        other = json.loads(edit(action="add_node", map_name="m", text="B", x=5300, y=5000))
        view(action="pointer_down", map_name="m", x=640, y=400, modifiers=["shift"])
        state = json.loads(view(action="pointer_move", map_name="m", x=700, y=400))
        assert state["state"] == "linking"
        state = json.loads(view(action="pointer_up", map_name="m", x=940, y=400))
        assert state["connection"]["source"] == root_id
        assert state["connection"]["target"] == other["id"]
        assert state["state"] == "idle"

    def test_drag_node(self) -> None:
        root_id = _map_with_root()
        view(action="pointer_down", map_name="m", x=640, y=400)
        view(action="pointer_move", map_name="m", x=640, y=450)
        view(action="pointer_up", map_name="m", x=640, y=450)
        assert _nodes()[root_id]["y"] == 5050


# ===================================================================
# inspect
# ===================================================================

class TestInspect:
    """Read-only views of a map."""

    def test_routes(self) -> None:
        root_id = _map_with_root()
        edit(action="add_child", map_name="m", node_id=root_id)
        routes = json.loads(inspect(action="routes", map_name="m"))
        (route,) = routes.values()
        assert route["bypass"] is False
        assert route["segments"][0]["start"] == {"x": 5050, "y": 5000}
        assert route["segments"][0]["end"] == {"x": 5150, "y": 5000}

    def test_subtree(self) -> None:
        root_id = _map_with_root()
        edit(action="add_child", map_name="m", node_id=root_id)
        bounds = json.loads(inspect(action="subtree", map_name="m", node_id=root_id))
        assert bounds == {"min_y": 4982, "max_y": 5018, "height": 36}

    def test_overlaps(self) -> None:
        canvas(action="create", name="m")
        edit(action="add_node", map_name="m", text="A", x=0, y=0)
        edit(action="add_node", map_name="m", text="B", x=0, y=10)
        report = json.loads(inspect(action="overlaps", map_name="m"))
        assert {report[0]["text_a"], report[0]["text_b"]} == {"A", "B"}

    def test_info_reports_cycles(self) -> None:
        canvas(action="create", name="m")
        a = json.loads(edit(action="add_node", map_name="m", text="A", x=0, y=0))
        b = json.loads(edit(action="add_node", map_name="m", text="B", x=300, y=0))
        edit(action="connect", map_name="m", node_id=a["id"], target_id=b["id"])
        edit(action="connect", map_name="m", node_id=b["id"], target_id=a["id"])
        info = json.loads(inspect(action="info", map_name="m"))
        assert info["nodes"] == 2
        assert info["roots"] == []
        assert len(info["cycles"]) == 1
        assert sorted(info["cycles"][0]) == sorted([a["id"], b["id"]])
