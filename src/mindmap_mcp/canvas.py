"""
Canvas interaction state machine.

Turns already-classified input events (pointer presses and moves in screen
coordinates, taps, scrolls, pinches, key presses) into map mutations.  A
press only becomes a drag once the pointer has travelled past a threshold.
What kind of drag it becomes depends on what was under the pointer and
which modifiers were held:

  resize handle of a selected node  -> RESIZING_NODE
  node with shift                   -> LINKING
  node                              -> DRAGGING_NODE
  empty canvas with the pan key     -> PANNING
  empty canvas                      -> SELECTING (rubber band)

UI follow-ups ("start editing this node", "focus this connection") are
queued as intents and handed out once by ``consume_intents``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from mindmap_mcp.config import CanvasConfig, LayoutConfig
from mindmap_mcp.graph import MindMap
from mindmap_mcp.layout import add_child, add_sibling, check_and_mirror, reflow
from mindmap_mcp.models import Connection, Node, Point, Rect, Size, TextRange
from mindmap_mcp.viewport import Viewport

logger = logging.getLogger("mindmap-mcp.canvas")

SHIFT = "shift"
PAN = "pan"
MODIFIERS = {SHIFT, PAN}


class CanvasState(Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    PANNING = "panning"
    DRAGGING_NODE = "dragging_node"
    LINKING = "linking"
    RESIZING_NODE = "resizing_node"


@dataclass(frozen=True)
class EditNodeIntent:
    node_id: str


@dataclass(frozen=True)
class FocusConnectionIntent:
    connection_id: str


Intent = Union[EditNodeIntent, FocusConnectionIntent]


@dataclass
class _Press:
    """Bookkeeping for a pointer that is down."""
    screen: Point
    world: Point
    node_id: Optional[str]
    on_handle: bool
    modifiers: frozenset[str]
    word_ranges: Optional[tuple[TextRange, ...]] = None
    word_rect: Optional[Rect] = None


class CanvasController:
    """Owns selection, transient gesture state and the viewport of one map."""

    def __init__(
        self,
        mind_map: MindMap,
        viewport: Optional[Viewport] = None,
        config: Optional[CanvasConfig] = None,
        layout_config: Optional[LayoutConfig] = None,
        screen_size: tuple[float, float] = (1280, 800),
    ) -> None:
        self.mind_map = mind_map
        self.viewport = viewport or Viewport()
        self.config = config or CanvasConfig()
        self.layout_config = layout_config or LayoutConfig()
        self.screen_size = screen_size

        self.state = CanvasState.IDLE
        self.selected_node_ids: set[str] = set()
        self.primary_node_id: Optional[str] = None
        self.selected_connection_id: Optional[str] = None
        self.selection_rect: Optional[Rect] = None

        # Linking
        self.link_source_id: Optional[str] = None
        self.link_point: Optional[Point] = None
        self.link_word_ranges: Optional[tuple[TextRange, ...]] = None
        self.link_word_rect: Optional[Rect] = None

        self._press: Optional[_Press] = None
        self._last_screen: Optional[Point] = None
        self._last_world: Optional[Point] = None
        self._drag_origins: dict[str, Point] = {}
        self._resize_start: Optional[Size] = None
        self._intents: list[Intent] = []

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_node(self) -> Optional[Node]:
        if self.primary_node_id is None:
            return None
        return self.mind_map.get_node(self.primary_node_id)

    def select_node(self, node: Optional[Node]) -> None:
        self.selected_node_ids = {node.id} if node else set()
        self.primary_node_id = node.id if node else None
        self.selected_connection_id = None

    def select_connection(self, connection: Optional[Connection]) -> None:
        self.selected_connection_id = connection.id if connection else None
        self.selected_node_ids = set()
        self.primary_node_id = None

    def deselect_all(self) -> None:
        self.selected_node_ids = set()
        self.primary_node_id = None
        self.selected_connection_id = None
        self.selection_rect = None

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def consume_intents(self) -> list[Intent]:
        """Hand out pending UI intents; each is delivered exactly once."""
        intents, self._intents = self._intents, []
        return intents

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def _handle_rect(self, node: Node) -> Rect:
        size = self.config.resize_handle_size / self.viewport.zoom_scale
        return Rect.from_center(node.x + node.width / 2, node.y + node.height / 2, size, size)

    def _hit_handle(self, world: Point) -> Optional[Node]:
        for node_id in self.selected_node_ids:
            node = self.mind_map.get_node(node_id)
            if node is not None and self._handle_rect(node).contains_point(world.x, world.y):
                return node
        return None

    def pointer_down(
        self,
        point: Point,
        modifiers: Iterable[str] = (),
        word_ranges: Optional[Iterable[TextRange]] = None,
        word_rect: Optional[Rect] = None,
    ) -> None:
        world = self.viewport.screen_to_world(point)
        handle_node = self._hit_handle(world)
        if handle_node is not None:
            node_id, on_handle = handle_node.id, True
        else:
            node = self.mind_map.find_node_at(world, self.config.hit_margin)
            node_id, on_handle = (node.id if node else None), False

        self._press = _Press(
            screen=point,
            world=world,
            node_id=node_id,
            on_handle=on_handle,
            modifiers=frozenset(m.lower() for m in modifiers),
            word_ranges=tuple(word_ranges) if word_ranges else None,
            word_rect=word_rect,
        )
        self._last_screen = point
        self._last_world = world

    def pointer_move(self, point: Point) -> None:
        press = self._press
        if press is None:
            return
        if self.state == CanvasState.IDLE:
            threshold = (self.config.node_drag_threshold if press.node_id
                         else self.config.canvas_drag_threshold)
            if press.screen.distance_to(point) <= threshold:
                return
            self._begin_drag(press)

        world = self.viewport.screen_to_world(point)
        if self.state == CanvasState.DRAGGING_NODE:
            delta = world - self._last_world
            for node_id in self.selected_node_ids:
                node = self.mind_map.get_node(node_id)
                if node is not None:
                    node.position = node.position + delta
        elif self.state == CanvasState.RESIZING_NODE:
            node = self.mind_map.get_node(press.node_id)
            if node is not None:
                total = world - press.world
                node.resize(self._resize_start.width + total.x, self._resize_start.height + total.y)
        elif self.state == CanvasState.LINKING:
            self.update_linking(world)
        elif self.state == CanvasState.PANNING:
            self.viewport.pan(point - self._last_screen)
        elif self.state == CanvasState.SELECTING:
            self.selection_rect = Rect.from_points(press.world, world)
            hits = self.mind_map.nodes_in_rect(self.selection_rect)
            self.selected_node_ids = {n.id for n in hits}
            self.primary_node_id = hits[0].id if hits else None

        self._last_screen = point
        # Panning moves the world under the pointer; keep the drag baseline consistent
        self._last_world = self.viewport.screen_to_world(point)

    def _begin_drag(self, press: _Press) -> None:
        node = self.mind_map.get_node(press.node_id) if press.node_id else None
        if node is not None and press.on_handle:
            self.state = CanvasState.RESIZING_NODE
            self._resize_start = node.size
        elif node is not None and SHIFT in press.modifiers:
            self.state = CanvasState.LINKING
            self.start_linking(node, press.word_ranges, press.word_rect)
        elif node is not None:
            self.state = CanvasState.DRAGGING_NODE
            if node.id not in self.selected_node_ids:
                self.select_node(node)
            self._drag_origins = {}
            for node_id in self.selected_node_ids:
                selected = self.mind_map.get_node(node_id)
                if selected is not None:
                    self._drag_origins[node_id] = selected.position
        elif PAN in press.modifiers:
            self.state = CanvasState.PANNING
        else:
            self.state = CanvasState.SELECTING
            self.deselect_all()
        logger.debug("Drag started: %s", self.state.value)

    def pointer_up(self, point: Point) -> Optional[Connection]:
        """Finish the current gesture.

        Returns the connection created when a link was dropped on a node.
        """
        press = self._press
        if press is None:
            return None
        created: Optional[Connection] = None

        if self.state == CanvasState.IDLE:
            self.tap(press.screen, 1)
        elif self.state == CanvasState.DRAGGING_NODE:
            self._finish_drag()
        elif self.state == CanvasState.RESIZING_NODE:
            node = self.mind_map.get_node(press.node_id)
            if node is not None:
                node.is_manually_sized = True
                reflow(self.mind_map, node, self.layout_config)
        elif self.state == CanvasState.LINKING:
            created = self.end_linking(self.viewport.screen_to_world(point))
        elif self.state == CanvasState.SELECTING:
            self.selection_rect = None

        self.state = CanvasState.IDLE
        self._press = None
        self._drag_origins = {}
        self._resize_start = None
        return created

    def _finish_drag(self) -> None:
        for node_id, origin in self._drag_origins.items():
            node = self.mind_map.get_node(node_id)
            if node is None or node.position == origin:
                continue
            check_and_mirror(self.mind_map, node, origin.x)
            reflow(self.mind_map, node, self.layout_config)

    def tap(self, point: Point, count: int = 1) -> Optional[Node]:
        """Single tap selects; double tap edits a node or creates one on empty canvas.

        Returns the node created by a double tap, if any.
        """
        world = self.viewport.screen_to_world(point)
        node = self.mind_map.find_node_at(world, self.config.hit_margin)
        if count >= 2:
            if node is None:
                node = self.mind_map.create_node("", world.x, world.y)
                self.select_node(node)
                self._intents.append(EditNodeIntent(node.id))
                return node
            self.select_node(node)
            self._intents.append(EditNodeIntent(node.id))
            return None

        if node is not None:
            self.select_node(node)
        else:
            self.deselect_all()
        return None

    def scroll(self, dx: float, dy: float) -> None:
        self.viewport.pan_by(dx, dy)

    def magnify(self, factor: float, anchor: Optional[Point] = None) -> bool:
        if anchor is None:
            anchor = Point(self.screen_size[0] / 2, self.screen_size[1] / 2)
        return self.viewport.process_zoom(factor, anchor)

    # ------------------------------------------------------------------
    # Linking
    # ------------------------------------------------------------------

    def start_linking(
        self,
        source: Node,
        word_ranges: Optional[Iterable[TextRange]] = None,
        word_rect: Optional[Rect] = None,
    ) -> None:
        self.state = CanvasState.LINKING
        self.link_source_id = source.id
        self.link_word_ranges = tuple(word_ranges) if word_ranges else None
        self.link_word_rect = word_rect
        if word_rect is not None:
            self.link_point = Point(
                source.x - source.width / 2 + word_rect.cx,
                source.y - source.height / 2 + word_rect.cy,
            )
        else:
            self.link_point = source.position

    def update_linking(self, world: Point) -> None:
        self.link_point = world

    def end_linking(self, world: Point) -> Optional[Connection]:
        """Drop the link at *world*; connects to the node found there, if any."""
        source = self.mind_map.get_node(self.link_source_id) if self.link_source_id else None
        ranges = self.link_word_ranges
        self.cancel_linking()
        if source is None:
            return None

        target = self.mind_map.find_node_at(world, self.config.hit_margin)
        if target is None:
            logger.debug("Link released over empty canvas")
            return None
        conn = self.mind_map.create_connection(source, target, from_ranges=ranges)
        if conn is not None:
            self._intents.append(FocusConnectionIntent(conn.id))
        return conn

    def cancel_linking(self) -> None:
        self.link_source_id = None
        self.link_point = None
        self.link_word_ranges = None
        self.link_word_rect = None
        if self.state == CanvasState.LINKING:
            self.state = CanvasState.IDLE

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def key_press(self, key: str) -> Optional[Node]:
        """Handle Escape, Tab, Enter and Delete/Backspace.

        Returns the node created by Tab or Enter, if any.
        """
        key = key.lower()
        if key == "escape":
            self.cancel()
            return None
        if key == "tab":
            return self.create_child()
        if key in ("enter", "return"):
            return self.create_sibling()
        if key in ("delete", "backspace"):
            self.delete_selection()
            return None
        logger.debug("Ignored key '%s'", key)
        return None

    def cancel(self) -> None:
        """Abort linking or rubber-banding and clear the selection.

        Positions already committed by a drag stay where they are.
        """
        self.cancel_linking()
        self._press = None
        self._drag_origins = {}
        self.state = CanvasState.IDLE
        self.deselect_all()

    def create_child(self) -> Optional[Node]:
        parent = self.selected_node
        if parent is None:
            logger.debug("Tab pressed with no selected node")
            return None
        child = add_child(self.mind_map, parent, config=self.layout_config)
        self.select_node(child)
        self._intents.append(EditNodeIntent(child.id))
        return child

    def create_sibling(self) -> Node:
        node = self.selected_node
        if node is None:
            center = self.viewport.visible_center(self.screen_size)
            created = self.mind_map.create_node("", center.x, center.y)
        else:
            created = add_sibling(self.mind_map, node, config=self.layout_config)
        self.select_node(created)
        self._intents.append(EditNodeIntent(created.id))
        return created

    def delete_selection(self) -> bool:
        if self.selected_connection_id is not None:
            conn = self.mind_map.get_connection(self.selected_connection_id)
            self.selected_connection_id = None
            if conn is not None:
                self.mind_map.delete_connection(conn)
                return True
        deleted = False
        for node_id in list(self.selected_node_ids):
            node = self.mind_map.get_node(node_id)
            if node is not None:
                self.mind_map.delete_node(node)
                deleted = True
        self.selected_node_ids = set()
        self.primary_node_id = None
        return deleted

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    def snapshot(self) -> dict:
        data = {
            "state": self.state.value,
            "selected_nodes": sorted(self.selected_node_ids),
            "selected_connection": self.selected_connection_id,
            "viewport": self.viewport.to_dict(),
        }
        if self.selection_rect is not None:
            data["selection_rect"] = self.selection_rect.to_dict()
        if self.link_source_id is not None:
            data["linking"] = {
                "source": self.link_source_id,
                "point": self.link_point.to_dict() if self.link_point else None,
            }
        return data
