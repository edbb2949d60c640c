# flowlint/model/document.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple


EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class ConnectionTarget:
    """One `{node, type, index}` descriptor: the receiving end of an edge."""
    node: str           # referenced node (name or id, as written)
    index: int = 0      # input port on the target
    type: str = "main"


@dataclass(frozen=True)
class Edge:
    """A connection target together with where it leaves its source."""
    source: str         # key of the `connections` entry, as written
    port: str           # output port type, e.g. "main"
    slot: int           # output slot index within the port
    target: ConnectionTarget


@dataclass(frozen=True)
class Node:
    index: int
    id: Optional[str]
    name: Optional[str]
    kind: Optional[str]
    position: Any = None
    parameters: Mapping[str, Any] = field(default_factory=lambda: EMPTY)
    credentials: Optional[Mapping[str, Any]] = None
    version_tag: Any = None
    extra: Mapping[str, Any] = field(default_factory=lambda: EMPTY)

    @property
    def key(self) -> str:
        """
        Graph vertex key: the id, else "name:<name>", else "#<index>".
        The prefixes keep id-less nodes from colliding with another node's id.
        """
        if self.id is not None and self.id.strip():
            return self.id
        if self.name is not None and self.name.strip():
            return f"name:{self.name}"
        return f"#{self.index}"

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        if self.id:
            return self.id
        return f"#{self.index}"

    @property
    def ref(self) -> str:
        """What findings name the node by: its id, else its name, else its index."""
        return self.id or self.label

    @property
    def kind_lower(self) -> str:
        return (self.kind or "").lower()


Slots = Tuple[Tuple[ConnectionTarget, ...], ...]


@dataclass(frozen=True)
class WorkflowDocument:
    nodes: Tuple[Node, ...]
    connections: Mapping[str, Mapping[str, Slots]] = field(default_factory=lambda: EMPTY)
    _by_name: Dict[str, Node] = field(init=False, repr=False, compare=False)
    _by_id: Dict[str, Node] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        by_name: Dict[str, Node] = {}
        by_id: Dict[str, Node] = {}
        for n in self.nodes:
            if n.name:
                by_name.setdefault(n.name, n)
            if n.id:
                by_id.setdefault(n.id, n)
        object.__setattr__(self, "_by_name", by_name)
        object.__setattr__(self, "_by_id", by_id)

    def resolve(self, ref: Optional[str]) -> Optional[Node]:
        """
        Find the node a connection refers to: by id first, then by name for
        n8n exports, which key connections by node name.
        The first occurrence wins when names or ids are duplicated.
        """
        if ref is None:
            return None
        node = self._by_id.get(ref)
        if node is None:
            node = self._by_name.get(ref)
        return node

    def edges(self) -> Iterator[Edge]:
        """All connection targets in document order."""
        for source, ports in self.connections.items():
            for port, slots in ports.items():
                for slot_idx, targets in enumerate(slots):
                    for t in targets:
                        yield Edge(source=source, port=port, slot=slot_idx, target=t)

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return tuple(n.id for n in self.nodes if n.id)
