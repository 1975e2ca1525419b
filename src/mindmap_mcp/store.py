"""
Persistence collaborator contract.

The map never owns storage.  It calls ``insert``/``delete`` on a store as part
of each mutation and reads the initial state through ``fetch_all``.
"""

from __future__ import annotations

from typing import Protocol, Union

from mindmap_mcp.models import Connection, Group, Node

Entity = Union[Node, Connection, Group]


class Store(Protocol):
    def insert(self, entity: Entity) -> None: ...

    def delete(self, entity: Entity) -> None: ...

    def fetch_all(self) -> tuple[list[Node], list[Connection], list[Group]]: ...


class InMemoryStore:
    """Non-persistent store that keeps entities in dicts and records every call."""

    def __init__(self) -> None:
        self.nodes: dict[str, Node] = {}
        self.connections: dict[str, Connection] = {}
        self.groups: dict[str, Group] = {}
        self.calls: list[tuple[str, str, str]] = []

    def _bucket(self, entity: Entity) -> dict:
        if isinstance(entity, Node):
            return self.nodes
        if isinstance(entity, Connection):
            return self.connections
        if isinstance(entity, Group):
            return self.groups
        raise TypeError(f"Unsupported entity type {type(entity).__name__}")

    def insert(self, entity: Entity) -> None:
        self._bucket(entity)[entity.id] = entity
        self.calls.append(("insert", type(entity).__name__, entity.id))

    def delete(self, entity: Entity) -> None:
        self._bucket(entity).pop(entity.id, None)
        self.calls.append(("delete", type(entity).__name__, entity.id))

    def fetch_all(self) -> tuple[list[Node], list[Connection], list[Group]]:
        return list(self.nodes.values()), list(self.connections.values()), list(self.groups.values())

    def count(self, op: str, kind: str = "") -> int:
        """Number of recorded *op* calls, optionally only for one entity type."""
        return sum(1 for name, k, _ in self.calls if name == op and (not kind or k == kind))
