"""
Mind-map MCP Server — build and lay out mind maps via Model Context Protocol.

Exposes 5 tools that let an LLM agent grow a mind map node by node while the
layout engine keeps it balanced and overlap free.

Tools:
  1. canvas   — lifecycle: create, list, delete, snapshot
  2. edit     — content:  add/move/resize/delete nodes, connect, group
  3. layout   — positioning: preview child placement, reflow, trident centring,
                             rebalance whole trees, resolve collisions
  4. view     — viewport and gestures: zoom, pan, coordinate conversion,
                             pointer/tap/key events through the canvas state machine
  5. inspect  — read-only: nodes, connections, groups, overlaps, routes, subtree
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from mindmap_mcp.canvas import CanvasController
from mindmap_mcp.collisions import (
    find_overlapping_pairs,
    resolve_all_collisions,
    resolve_for_new_node,
)
from mindmap_mcp.graph import MindMap
from mindmap_mcp.groups import group_geometry, group_nodes, ungroup
from mindmap_mcp.layout import (
    add_child,
    add_sibling,
    apply_trident_recursively,
    center_parent_over_children,
    check_and_mirror,
    place_new_child,
    rebalance_tree,
    reflow,
)
from mindmap_mcp.models import Node, Point, Rect, Size, TextRange
from mindmap_mcp.routing import route_all
from mindmap_mcp.subtree import compute_subtree_bounds
from mindmap_mcp.validation import (
    ValidationError,
    validate_action,
    validate_bool,
    validate_color,
    validate_key,
    validate_modifiers,
    validate_node_ids,
    validate_int,
    validate_non_empty_string,
    validate_number,
    validate_rect_dict,
    validate_size,
    validate_string,
    validate_text_ranges,
    validate_zoom_factor,
    _CANVAS_ACTIONS,
    _EDIT_ACTIONS,
    _LAYOUT_ACTIONS,
    _VIEW_ACTIONS,
    _INSPECT_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging — suppress routine FastMCP INFO messages that clients show
# as warnings (they go to stderr).
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("mindmap-mcp")

# Where a fresh map's root goes and what the viewport centres on
DEFAULT_CENTER = Point(5000, 5000)

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "mindmap-mcp",
    instructions=(
        "MCP server for building mind maps with automatic, balanced layout.\n\n"
        "=== ONLY 5 TOOLS — use the 'action' parameter to pick the operation ===\n\n"
        "1. canvas(action, ...) — lifecycle: create, list, delete, snapshot.\n"
        "2. edit(action, ...) — content: add_node, add_child, add_sibling,\n"
        "   move_node, resize_node, set_text, pin, delete_node, connect,\n"
        "   disconnect, set_label, group, ungroup.\n"
        "3. layout(action, ...) — positioning: preview_child, reflow,\n"
        "   center_parent, rebalance_tree, resolve_collisions.\n"
        "4. view(action, ...) — viewport & gestures: zoom, pan, center_on,\n"
        "   screen_to_world, world_to_screen, pointer_down, pointer_move,\n"
        "   pointer_up, tap, key.\n"
        "5. inspect(action, ...) — read-only: nodes, connections, groups,\n"
        "   overlaps, routes, subtree, info, intents.\n\n"
        "=== RULES ===\n"
        "- Positions are node CENTRES in world coordinates.\n"
        "- PREFER edit(action='add_child') over add_node: it places the child on\n"
        "  the less crowded side of the root, below existing branches, and\n"
        "  recentres the parent automatically.\n"
        "- The root never moves; its children shift instead.\n"
        "- Pinned nodes are never moved by layout or collision handling.\n"
        "- After moving a node manually, call layout(action='reflow').\n"
    ),
)

# In-memory map registry: name -> controller (which owns map + viewport)
# Guarded by _maps_lock for thread-safety.
_maps: dict[str, CanvasController] = {}
_maps_lock = threading.Lock()


# ===================================================================
# TOOL 1: canvas — lifecycle
# ===================================================================

@mcp.tool()
def canvas(
    action: str,
    name: str = "",
    root_text: str = "",
    screen_width: float = 1280,
    screen_height: float = 800,
) -> str:
    """Mind-map lifecycle management.

    Actions:
      create   — Create a new map. Params: name, root_text (optional root node
                 placed at 5000,5000), screen_width, screen_height.
      list     — List all in-memory maps. No params needed.
      delete   — Remove a map from memory. Params: name.
      snapshot — Full JSON dump of nodes, connections, groups, viewport and
                 interaction state. Params: name.

    Args:
        action: One of: create, list, delete, snapshot.
        name: Map name (key in memory).
        root_text: Text of the root node created with the map.
        screen_width: Width of the (virtual) screen in pixels.
        screen_height: Height of the (virtual) screen in pixels.

    Returns:
        Result string or JSON depending on action.
    """
    try:
        action = validate_action(action, "canvas", _CANVAS_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "create":
        try:
            name = validate_non_empty_string(name, "name")
            validate_string(root_text, "root_text")
            validate_number(screen_width, "screen_width", min_val=1)
            validate_number(screen_height, "screen_height", min_val=1)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        mind_map = MindMap(name=name)
        controller = CanvasController(mind_map, screen_size=(screen_width, screen_height))
        controller.viewport.center_on(DEFAULT_CENTER, controller.screen_size)
        result: dict[str, Any] = {"name": name}
        if root_text:
            root = mind_map.create_node(root_text, DEFAULT_CENTER.x, DEFAULT_CENTER.y)
            result["root_id"] = root.id
        with _maps_lock:
            _maps[name] = controller
        logger.info("Created map '%s'", name)
        return json.dumps(result)

    elif action == "list":
        with _maps_lock:
            listing = [
                {"name": n, "nodes": len(c.mind_map.nodes),
                 "connections": len(c.mind_map.connections), "groups": len(c.mind_map.groups)}
                for n, c in _maps.items()
            ]
        return json.dumps(listing, indent=2)

    elif action == "delete":
        try:
            name = validate_non_empty_string(name, "name")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        with _maps_lock:
            if _maps.pop(name, None) is None:
                return f"Error: map '{name}' not found."
        logger.info("Deleted map '%s'", name)
        return f"Map '{name}' deleted."

    elif action == "snapshot":
        try:
            name = validate_non_empty_string(name, "name")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        ctl = _maps.get(name)
        if not ctl:
            return f"Error: map '{name}' not found."
        m = ctl.mind_map
        return json.dumps({
            "name": name,
            "nodes": [n.to_dict() for n in m.nodes.values()],
            "connections": [c.to_dict() for c in m.connections.values()],
            "groups": [g.to_dict() for g in m.groups.values()],
            "interaction": ctl.snapshot(),
        }, indent=2)

    else:
        return f"Error: unknown canvas action '{action}'. Use: create, list, delete, snapshot."


# ===================================================================
# TOOL 2: edit — content
# ===================================================================

@mcp.tool()
def edit(
    action: str,
    map_name: str,
    node_id: str = "",
    target_id: str = "",
    connection_id: str = "",
    group_id: str = "",
    text: str = "",
    label: str = "",
    x: float = 0,
    y: float = 0,
    width: float = 0,
    height: float = 0,
    pinned: bool = True,
    color: str = "",
    node_ids: Optional[list[str]] = None,
    ranges: Optional[list[Any]] = None,
    auto_layout: bool = True,
    delete_label: bool = False,
) -> str:
    """Create, change and delete map content.

    Actions:
      add_node    — Free node at a position. Params: text, x, y, width/height (optional),
                    color (optional #RRGGBB).
      add_child   — Child of node_id, placed automatically. Params: node_id, text,
                    width/height (optional).
      add_sibling — Sibling of node_id (new child of its parent). Params: node_id, text.
      move_node   — Move node_id to x, y. With auto_layout the subtree is mirrored if
                    the node crossed the root, then the layout is reflowed.
      resize_node — Params: node_id, width, height (clamped to 60x28 minimum).
      set_text    — Params: node_id, text.
      pin         — Pin/unpin a node so layout never moves it. Params: node_id, pinned.
      delete_node — Delete node_id with all its connections. Params: node_id.
      connect     — Connect node_id -> target_id. Params: label, ranges (optional
                    [[location, length], ...] of node_id's text to anchor on).
      disconnect  — Params: connection_id.
      set_label   — Params: connection_id, label.
      group       — Brace around node_ids with a label node. Params: node_ids, text.
      ungroup     — Params: group_id, delete_label.

    Args:
        action: One of the actions above.
        map_name: Target map.
        node_id: Node to act on (source for connect, parent for add_child).
        target_id: Target node for connect.
        connection_id: Connection for disconnect / set_label.
        group_id: Group for ungroup.
        text: Node text.
        label: Connection label.
        x: World X (centre).
        y: World Y (centre).
        width: Node width (0 = default).
        height: Node height (0 = default).
        pinned: Pin state for the pin action.
        color: Optional node colour.
        node_ids: Members for the group action.
        ranges: Word-anchor ranges for connect.
        auto_layout: Reflow after move_node / resize_node.
        delete_label: Also delete the label node when ungrouping.

    Returns:
        JSON for created entities, otherwise a confirmation string.
    """
    try:
        action = validate_action(action, "edit", _EDIT_ACTIONS)
        map_name = validate_non_empty_string(map_name, "map_name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    ctl = _maps.get(map_name)
    if not ctl:
        return f"Error: map '{map_name}' not found."
    m = ctl.mind_map
    cfg = ctl.layout_config

    with _maps_lock:
        if action == "add_node":
            try:
                validate_string(text, "text")
                validate_number(x, "x")
                validate_number(y, "y")
                if color:
                    validate_color(color, "color")
                size = _optional_size(width, height)
            except ValidationError as exc:
                return f"Error: {exc.message}"
            node = m.create_node(text, x, y)
            if size:
                node.resize(size.width, size.height)
            node.color = color or None
            return json.dumps(node.to_dict())

        elif action in ("add_child", "add_sibling"):
            try:
                node = _require_node(m, node_id, "node_id")
                validate_string(text, "text")
                size = _optional_size(width, height)
            except ValidationError as exc:
                return f"Error: {exc.message}"
            if action == "add_child":
                created = add_child(m, node, text, size, cfg)
            else:
                created = add_sibling(m, node, text, cfg)
            ctl.select_node(created)
            return json.dumps(created.to_dict())

        elif action == "move_node":
            try:
                node = _require_node(m, node_id, "node_id")
                validate_number(x, "x")
                validate_number(y, "y")
                validate_bool(auto_layout, "auto_layout")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            previous_x = node.x
            node.position = Point(x, y)
            mirrored = False
            if auto_layout:
                mirrored = check_and_mirror(m, node, previous_x)
                reflow(m, node, cfg)
            return json.dumps({"node": node.to_dict(), "mirrored": mirrored})

        elif action == "resize_node":
            try:
                node = _require_node(m, node_id, "node_id")
                w, h = validate_size(width, height)
            except ValidationError as exc:
                return f"Error: {exc.message}"
            node.resize(w, h)
            if auto_layout:
                reflow(m, node, cfg)
            return json.dumps(node.to_dict())

        elif action == "set_text":
            try:
                node = _require_node(m, node_id, "node_id")
                validate_string(text, "text")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            m.set_text(node, text)
            return f"Text of node '{node.id}' updated."

        elif action == "pin":
            try:
                node = _require_node(m, node_id, "node_id")
                validate_bool(pinned, "pinned")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            node.is_pinned = pinned
            return f"Node '{node.id}' {'pinned' if pinned else 'unpinned'}."

        elif action == "delete_node":
            try:
                node = _require_node(m, node_id, "node_id")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            removed = m.delete_node(node)
            ctl.selected_node_ids.discard(node.id)
            if ctl.primary_node_id == node.id:
                ctl.primary_node_id = None
            return f"Node '{node.id}' deleted with {removed} connection(s)."

        elif action == "connect":
            try:
                source = _require_node(m, node_id, "node_id")
                target = _require_node(m, target_id, "target_id")
                validate_string(label, "label")
                pairs = validate_text_ranges(ranges)
            except ValidationError as exc:
                return f"Error: {exc.message}"
            anchors = [TextRange(loc, length) for loc, length in pairs] if pairs else None
            conn = m.create_connection(source, target, label, anchors)
            if conn is None:
                return "Error: connection rejected (self-loop or duplicate)."
            return json.dumps(conn.to_dict())

        elif action in ("disconnect", "set_label"):
            try:
                connection_id = validate_non_empty_string(connection_id, "connection_id")
                validate_string(label, "label")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            conn = m.get_connection(connection_id)
            if conn is None:
                return f"Error: connection '{connection_id}' not found."
            if action == "disconnect":
                m.delete_connection(conn)
                return f"Connection '{connection_id}' deleted."
            m.set_connection_label(conn, label)
            return f"Label of connection '{connection_id}' updated."

        elif action == "group":
            try:
                ids = validate_node_ids(node_ids)
                validate_string(text, "text")
                members = [_require_node(m, i, "node_ids") for i in ids]
            except ValidationError as exc:
                return f"Error: {exc.message}"
            group = group_nodes(m, members, text, layout_config=cfg)
            return json.dumps(group.to_dict())

        elif action == "ungroup":
            try:
                group_id = validate_non_empty_string(group_id, "group_id")
                validate_bool(delete_label, "delete_label")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            group = m.get_group(group_id)
            if group is None:
                return f"Error: group '{group_id}' not found."
            ungroup(m, group, delete_label)
            return f"Group '{group_id}' removed."

    return f"Error: unknown edit action '{action}'."


# ===================================================================
# TOOL 3: layout — positioning
# ===================================================================

@mcp.tool()
def layout(
    action: str,
    map_name: str,
    node_id: str = "",
    width: float = 0,
    height: float = 0,
    recursive: bool = False,
) -> str:
    """Automatic positioning.

    Actions:
      preview_child      — Where a new child of node_id would go, without creating
                           it. Params: node_id, width/height (optional).
      reflow             — Re-centre ancestors, separate siblings and clear the node
                           after a manual move. Params: node_id.
      center_parent      — Trident-centre node_id over its children (root: children
                           move instead). Params: node_id, recursive.
      rebalance_tree     — Trident-centre every tree bottom-up, then resolve
                           collisions globally. No params.
      resolve_collisions — Push node_id (or, without node_id, every node) clear of
                           overlaps. Params: node_id (optional).

    Args:
        action: One of: preview_child, reflow, center_parent, rebalance_tree,
                resolve_collisions.
        map_name: Target map.
        node_id: Node to act on.
        width: Width of the prospective child (0 = default).
        height: Height of the prospective child (0 = default).
        recursive: Apply center_parent to the whole subtree, deepest first.

    Returns:
        JSON result.
    """
    try:
        action = validate_action(action, "layout", _LAYOUT_ACTIONS)
        map_name = validate_non_empty_string(map_name, "map_name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    ctl = _maps.get(map_name)
    if not ctl:
        return f"Error: map '{map_name}' not found."
    m = ctl.mind_map
    cfg = ctl.layout_config

    with _maps_lock:
        if action == "rebalance_tree":
            unresolved = rebalance_tree(m, cfg)
            return json.dumps({"unresolved": unresolved})

        if action == "resolve_collisions" and not node_id:
            unresolved = resolve_all_collisions(m, cfg)
            return json.dumps({"unresolved": unresolved})

        try:
            node = _require_node(m, node_id, "node_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"

        if action == "preview_child":
            try:
                size = _optional_size(width, height)
            except ValidationError as exc:
                return f"Error: {exc.message}"
            result = place_new_child(m, node, size=size, config=cfg)
            return json.dumps(result.to_dict(), indent=2)

        elif action == "reflow":
            clear = reflow(m, node, cfg)
            return json.dumps({"node": node.to_dict(), "collision_free": clear})

        elif action == "center_parent":
            try:
                validate_bool(recursive, "recursive")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            if recursive:
                apply_trident_recursively(m, node, cfg)
                moved = True
            else:
                moved = center_parent_over_children(m, node, cfg)
            return json.dumps({"node": node.to_dict(), "moved": moved})

        elif action == "resolve_collisions":
            clear = resolve_for_new_node(m, node, config=cfg)
            return json.dumps({"node": node.to_dict(), "collision_free": clear})

    return f"Error: unknown layout action '{action}'."


# ===================================================================
# TOOL 4: view — viewport & gestures
# ===================================================================

@mcp.tool()
def view(
    action: str,
    map_name: str,
    x: float = 0,
    y: float = 0,
    dx: float = 0,
    dy: float = 0,
    factor: float = 1.0,
    count: int = 1,
    key: str = "",
    modifiers: Optional[list[str]] = None,
    ranges: Optional[list[Any]] = None,
    word_rect: Optional[dict[str, float]] = None,
) -> str:
    """Viewport control and canvas gestures (screen coordinates).

    Actions:
      zoom            — Multiply zoom by factor around screen point x, y.
      pan             — Shift the view by dx, dy screen pixels.
      center_on       — Centre the view on world point x, y.
      screen_to_world — Convert screen x, y to world coordinates.
      world_to_screen — Convert world x, y to screen coordinates.
      pointer_down    — Press at screen x, y. Params: modifiers (["shift"] links,
                        ["pan"] pans), ranges + word_rect when pressing on a word.
      pointer_move    — Move the pressed pointer to screen x, y.
      pointer_up      — Release at screen x, y (returns any created connection).
      tap             — Tap at screen x, y. Params: count (2 = double tap).
      key             — Key press: escape, tab, enter, delete, backspace.

    Args:
        action: One of the actions above.
        map_name: Target map.
        x: Screen X (world X for center_on / world_to_screen).
        y: Screen Y (world Y for center_on / world_to_screen).
        dx: Horizontal pan in screen pixels.
        dy: Vertical pan in screen pixels.
        factor: Zoom multiplier (> 1 zooms in).
        count: Tap count.
        key: Key name for the key action.
        modifiers: Held modifiers for pointer_down.
        ranges: Word ranges under the pointer for pointer_down.
        word_rect: Node-local rectangle of that word for pointer_down.

    Returns:
        JSON with the resulting interaction state.
    """
    try:
        action = validate_action(action, "view", _VIEW_ACTIONS)
        map_name = validate_non_empty_string(map_name, "map_name")
        validate_number(x, "x")
        validate_number(y, "y")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    ctl = _maps.get(map_name)
    if not ctl:
        return f"Error: map '{map_name}' not found."
    point = Point(x, y)
    extra: dict[str, Any] = {}

    with _maps_lock:
        if action == "zoom":
            try:
                validate_zoom_factor(factor)
            except ValidationError as exc:
                return f"Error: {exc.message}"
            extra["changed"] = ctl.magnify(factor, point)

        elif action == "pan":
            try:
                validate_number(dx, "dx")
                validate_number(dy, "dy")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            ctl.scroll(dx, dy)

        elif action == "center_on":
            ctl.viewport.center_on(point, ctl.screen_size)

        elif action == "screen_to_world":
            return json.dumps(ctl.viewport.screen_to_world(point).to_dict())

        elif action == "world_to_screen":
            return json.dumps(ctl.viewport.world_to_screen(point).to_dict())

        elif action == "pointer_down":
            try:
                mods = validate_modifiers(modifiers)
                pairs = validate_text_ranges(ranges)
                rect = validate_rect_dict(word_rect, "word_rect")
            except ValidationError as exc:
                return f"Error: {exc.message}"
            ctl.pointer_down(
                point,
                mods,
                [TextRange(loc, length) for loc, length in pairs] if pairs else None,
                Rect(**rect) if rect else None,
            )

        elif action == "pointer_move":
            ctl.pointer_move(point)

        elif action == "pointer_up":
            conn = ctl.pointer_up(point)
            if conn is not None:
                extra["connection"] = conn.to_dict()

        elif action == "tap":
            try:
                validate_int(count, "count", min_val=1)
            except ValidationError as exc:
                return f"Error: {exc.message}"
            created = ctl.tap(point, count)
            if created is not None:
                extra["created"] = created.to_dict()

        elif action == "key":
            try:
                key = validate_key(key)
            except ValidationError as exc:
                return f"Error: {exc.message}"
            created = ctl.key_press(key)
            if created is not None:
                extra["created"] = created.to_dict()

        state = ctl.snapshot()
    state.update(extra)
    return json.dumps(state, indent=2)


# ===================================================================
# TOOL 5: inspect — read-only
# ===================================================================

@mcp.tool()
def inspect(
    action: str,
    map_name: str,
    node_id: str = "",
    padding: float = 20,
) -> str:
    """Read-only inspection of maps.

    Actions:
      nodes       — All nodes with ids, text, positions and sizes.
      connections — All connections.
      groups      — Groups with bounding box and brace geometry.
      overlaps    — Pairs of nodes closer than padding. Params: padding.
      routes      — Bezier curves for every connection.
      subtree     — Vertical bounds of node_id's subtree. Params: node_id.
      info        — Counts, roots and any primary-parent cycle.
      intents     — Pending UI intents (edit node / focus connection); consuming.

    Args:
        action: One of: nodes, connections, groups, overlaps, routes, subtree,
                info, intents.
        map_name: Target map.
        node_id: Node for subtree.
        padding: Minimum gap for overlap checks.

    Returns:
        JSON data or formatted text.
    """
    try:
        action = validate_action(action, "inspect", _INSPECT_ACTIONS)
        map_name = validate_non_empty_string(map_name, "map_name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    ctl = _maps.get(map_name)
    if not ctl:
        return f"Error: map '{map_name}' not found."
    m = ctl.mind_map

    if action == "nodes":
        return json.dumps([n.to_dict() for n in m.nodes.values()], indent=2)

    elif action == "connections":
        return json.dumps([c.to_dict() for c in m.connections.values()], indent=2)

    elif action == "groups":
        return json.dumps([group_geometry(m, g) for g in m.groups.values()], indent=2)

    elif action == "overlaps":
        try:
            validate_number(padding, "padding", min_val=0)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        pairs = find_overlapping_pairs(m, padding)
        if not pairs:
            return "No overlaps found. Map is clean!"
        report = [{"node_a": a, "text_a": m.nodes[a].text,
                   "node_b": b, "text_b": m.nodes[b].text}
                  for a, b in pairs]
        return json.dumps(report, indent=2)

    elif action == "routes":
        routes = route_all(m)
        return json.dumps({cid: path.to_dict() for cid, path in routes.items()}, indent=2)

    elif action == "subtree":
        try:
            node = _require_node(m, node_id, "node_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return json.dumps(compute_subtree_bounds(m, node).to_dict())

    elif action == "info":
        cycles = []
        for n in m.nodes.values():
            cycle = m.find_parent_cycle(n)
            if cycle and sorted(cycle) not in [sorted(c) for c in cycles]:
                cycles.append(cycle)
        return json.dumps({
            "name": map_name,
            "nodes": len(m.nodes),
            "connections": len(m.connections),
            "groups": len(m.groups),
            "roots": [r.id for r in m.roots()],
            "cycles": cycles,
            "viewport": ctl.viewport.to_dict(),
        }, indent=2)

    elif action == "intents":
        intents = ctl.consume_intents()
        return json.dumps([
            {"type": type(i).__name__, **i.__dict__} for i in intents
        ], indent=2)

    return f"Error: unknown inspect action '{action}'."


# ===================================================================
# Internal helpers
# ===================================================================

def _require_node(m: MindMap, node_id: Any, field_name: str) -> Node:
    node_id = validate_non_empty_string(node_id, field_name)
    node = m.get_node(node_id)
    if node is None:
        raise ValidationError(f"Node '{node_id}' not found.")
    return node


def _optional_size(width: Any, height: Any) -> Optional[Size]:
    """Size from width/height, or None when both are left at 0."""
    if width == 0 and height == 0:
        return None
    w, h = validate_size(width or 100, height or 36)
    return Size(w, h)


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
