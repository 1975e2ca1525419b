"""
The mind-map arena: nodes, connections and groups keyed by id, plus the
tree-navigation queries the layout code is built on.

Connections form a general directed graph.  For layout purposes each node's
*primary parent* is the source of its first incoming connection (creation
order), which turns the graph into a forest.  Walks over that forest are
guarded against cycles: a cycle is a defect, logged and cut short rather
than followed forever.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from mindmap_mcp.models import Connection, Group, Node, Point, Rect, TextRange
from mindmap_mcp.store import Entity, InMemoryStore, Store

logger = logging.getLogger("mindmap-mcp.graph")


class MindMap:
    """In-memory map state mirrored to a persistence store."""

    def __init__(self, store: Optional[Store] = None, name: str = "") -> None:
        self.name = name
        self.store: Store = store if store is not None else InMemoryStore()
        self.nodes: dict[str, Node] = {}
        # Insertion order is creation order; parent lookup depends on it
        self.connections: dict[str, Connection] = {}
        self.groups: dict[str, Group] = {}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory state with whatever the store holds."""
        try:
            nodes, connections, groups = self.store.fetch_all()
        except Exception:
            logger.exception("Failed to load map '%s' from store", self.name)
            return
        self.nodes = {n.id: n for n in nodes}
        self.connections = {c.id: c for c in connections}
        self.groups = {g.id: g for g in groups}

    def _persist(self, op: str, entity: Entity) -> None:
        try:
            getattr(self.store, op)(entity)
        except Exception:
            logger.exception("Store %s failed for %s '%s'", op, type(entity).__name__, entity.id)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def add_node(self, node: Node) -> Node:
        self.nodes[node.id] = node
        self._persist("insert", node)
        return node

    def create_node(
        self,
        text: str = "",
        x: float = 0,
        y: float = 0,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> Node:
        node = Node(text=text, x=x, y=y)
        if width is not None or height is not None:
            node.resize(width or node.width, height or node.height)
        return self.add_node(node)

    def set_text(self, node: Node, text: str) -> None:
        node.text = text

    def delete_node(self, node: Node) -> int:
        """Delete a node with its connections and any group it labels.

        Returns the number of connections removed.
        """
        doomed = [c for c in self.connections.values()
                  if c.source_id == node.id or c.target_id == node.id]
        for conn in doomed:
            self.delete_connection(conn)

        for group in list(self.groups.values()):
            if group.id not in self.groups:
                continue
            if group.label_node_id == node.id:
                self.delete_group(group)
            elif node.id in group.member_node_ids:
                group.member_node_ids.discard(node.id)
                if not group.member_node_ids:
                    self.delete_group(group, delete_label=True)

        self.nodes.pop(node.id, None)
        self._persist("delete", node)
        logger.debug("Deleted node %s (%d connections)", node.id, len(doomed))
        return len(doomed)

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def get_connection(self, connection_id: str) -> Optional[Connection]:
        return self.connections.get(connection_id)

    def find_duplicate(
        self,
        source_id: str,
        target_id: str,
        from_ranges: Optional[Iterable[TextRange]] = None,
    ) -> Optional[Connection]:
        key = frozenset(from_ranges) if from_ranges else None
        for conn in self.connections.values():
            if (conn.source_id == source_id and conn.target_id == target_id
                    and conn.anchor_key() == key):
                return conn
        return None

    def create_connection(
        self,
        source: Node,
        target: Node,
        label: str = "",
        from_ranges: Optional[Iterable[TextRange]] = None,
    ) -> Optional[Connection]:
        """Connect two nodes.

        Returns None for self-loops, unknown endpoints and duplicates (same
        endpoints and same anchor-range set).  Two links between the same
        nodes anchored to different words are parallel links, not duplicates.
        """
        if source.id == target.id:
            logger.debug("Rejected self-loop on node %s", source.id)
            return None
        if source.id not in self.nodes or target.id not in self.nodes:
            logger.debug("Rejected connection with unknown endpoint %s -> %s", source.id, target.id)
            return None
        ranges = tuple(from_ranges) if from_ranges else None
        if self.find_duplicate(source.id, target.id, ranges) is not None:
            logger.debug("Rejected duplicate connection %s -> %s", source.id, target.id)
            return None
        conn = Connection(source_id=source.id, target_id=target.id, label=label, from_ranges=ranges)
        self.connections[conn.id] = conn
        self._persist("insert", conn)
        return conn

    def delete_connection(self, connection: Connection) -> None:
        self.connections.pop(connection.id, None)
        self._persist("delete", connection)

    def set_connection_label(self, connection: Connection, label: str) -> None:
        connection.label = label

    def outgoing(self, node: Node) -> list[Connection]:
        return [c for c in self.connections.values() if c.source_id == node.id]

    def incoming(self, node: Node) -> list[Connection]:
        return [c for c in self.connections.values() if c.target_id == node.id]

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def get_group(self, group_id: str) -> Optional[Group]:
        return self.groups.get(group_id)

    def add_group(self, group: Group) -> Group:
        self.groups[group.id] = group
        self._persist("insert", group)
        return group

    def delete_group(self, group: Group, delete_label: bool = False) -> None:
        """Remove a group.  The label node survives unless *delete_label* is set."""
        self.groups.pop(group.id, None)
        self._persist("delete", group)
        if delete_label and group.label_node_id:
            label = self.nodes.get(group.label_node_id)
            if label is not None:
                self.delete_node(label)

    # ------------------------------------------------------------------
    # Tree navigation
    # ------------------------------------------------------------------

    def children_of(self, node: Node) -> list[Node]:
        children: list[Node] = []
        for conn in self.connections.values():
            if conn.source_id == node.id:
                child = self.nodes.get(conn.target_id)
                if child is not None:
                    children.append(child)
        return children

    def parent_of(self, node: Node) -> Optional[Node]:
        for conn in self.connections.values():
            if conn.target_id == node.id:
                return self.nodes.get(conn.source_id)
        return None

    def siblings_of(self, node: Node) -> list[Node]:
        parent = self.parent_of(node)
        if parent is None:
            return []
        return [c for c in self.children_of(parent) if c.id != node.id]

    def is_root(self, node: Node) -> bool:
        return self.parent_of(node) is None

    def roots(self) -> list[Node]:
        return [n for n in self.nodes.values() if self.parent_of(n) is None]

    def ancestors_of(self, node: Node) -> list[Node]:
        """Primary-parent chain from *node* upwards, nearest first, cycle-safe."""
        chain: list[Node] = []
        seen = {node.id}
        current = self.parent_of(node)
        while current is not None:
            if current.id in seen:
                logger.warning("Parent cycle detected at node %s", current.id)
                break
            seen.add(current.id)
            chain.append(current)
            current = self.parent_of(current)
        return chain

    def root_of(self, node: Node) -> Node:
        """Top of the primary-parent chain.

        If the chain loops, the last node reached before the loop closes is
        returned.
        """
        chain = self.ancestors_of(node)
        return chain[-1] if chain else node

    def find_parent_cycle(self, node: Node) -> Optional[list[str]]:
        """Return the ids forming a primary-parent cycle reachable from *node*."""
        path: list[str] = []
        index: dict[str, int] = {}
        current: Optional[Node] = node
        while current is not None:
            if current.id in index:
                return path[index[current.id]:]
            index[current.id] = len(path)
            path.append(current.id)
            current = self.parent_of(current)
        return None

    def iter_descendants(self, node: Node) -> Iterator[Node]:
        """Depth-first walk over everything below *node* (excluding it)."""
        seen = {node.id}
        stack = list(reversed(self.children_of(node)))
        while stack:
            current = stack.pop()
            if current.id in seen:
                continue
            seen.add(current.id)
            yield current
            stack.extend(reversed(self.children_of(current)))

    # ------------------------------------------------------------------
    # Hit testing
    # ------------------------------------------------------------------

    def find_node_at(self, point: Point, margin: float = 0) -> Optional[Node]:
        """Topmost node whose rectangle contains *point*."""
        for node in reversed(list(self.nodes.values())):
            if node.rect.contains_point(point.x, point.y, margin):
                return node
        return None

    def nodes_in_rect(self, rect: Rect) -> list[Node]:
        return [n for n in self.nodes.values() if n.rect.intersects(rect)]
