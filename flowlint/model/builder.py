# flowlint/model/builder.py

import json
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from flowlint.exceptions import ParseError
from flowlint.model.document import EMPTY, ConnectionTarget, Node, Slots, WorkflowDocument
from flowlint.model.schema import WORKFLOW_SHAPE_SCHEMA
from flowlint.utils.logger import get_logger

logger = get_logger("builder")

_VALIDATOR = Draft7Validator(WORKFLOW_SHAPE_SCHEMA)

# Node keys mapped onto Node fields; anything else is kept in Node.extra
_KNOWN_KEYS = {"id", "name", "type", "position", "parameters", "credentials", "typeVersion", "versionTag"}


def parse_document(text: str, source: str = "<input>") -> WorkflowDocument:
    """Decode JSON text and build the document."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})", source) from e
    return build_document(raw, source=source)


def build_document(raw: Any, source: str = "<input>") -> WorkflowDocument:
    """
    Turn an already-decoded workflow export into an immutable WorkflowDocument.

    Only the decodable shape is enforced here (see model/schema.py); a node
    without an id or a connection to a missing node is still built and left
    to the checkers. Raises ParseError on shape violations.
    """
    error = best_match(_VALIDATOR.iter_errors(raw))
    if error is not None:
        where = "/".join(str(p) for p in error.absolute_path) or "<root>"
        raise ParseError(f"malformed workflow at {where}: {error.message}", source)

    nodes = tuple(_build_node(i, n) for i, n in enumerate(raw.get("nodes") or []))
    connections = _build_connections(raw.get("connections") or {})

    logger.debug("built %s: %d nodes, %d connection sources", source, len(nodes), len(connections))
    return WorkflowDocument(nodes=nodes, connections=connections)


def _as_text(v: Any):
    if v is None:
        return None
    return str(v)


def _build_node(index: int, n: Dict[str, Any]) -> Node:
    creds = n.get("credentials")
    version = n.get("typeVersion")
    if version is None:
        version = n.get("versionTag")

    return Node(
        index=index,
        id=_as_text(n.get("id")),
        name=_as_text(n.get("name")),
        kind=_as_text(n.get("type")),
        position=n.get("position"),
        parameters=MappingProxyType(dict(n.get("parameters") or {})),
        credentials=MappingProxyType(dict(creds)) if creds is not None else None,
        version_tag=version,
        extra=MappingProxyType({k: v for k, v in n.items() if k not in _KNOWN_KEYS}),
    )


def _build_connections(conns: Dict[str, Any]) -> Mapping[str, Mapping[str, Slots]]:
    """
    n8n connections: connections[<source>][<port>][<slot>] -> list of {node, type, index}.
    A bare target object in place of the slot list is treated as a one-target slot,
    a null slot as an empty one.
    """
    out: Dict[str, Mapping[str, Slots]] = {}
    for src, ports in conns.items():
        built_ports: Dict[str, Slots] = {}
        for port, slots in ports.items():
            built_slots: List[Tuple[ConnectionTarget, ...]] = []
            for slot in slots:
                if slot is None:
                    built_slots.append(())
                elif isinstance(slot, dict):
                    built_slots.append((_build_target(slot, port),))
                else:
                    built_slots.append(tuple(_build_target(t, port) for t in slot))
            built_ports[port] = tuple(built_slots)
        out[src] = MappingProxyType(built_ports) if built_ports else EMPTY
    return MappingProxyType(out)


def _build_target(t: Dict[str, Any], port: str) -> ConnectionTarget:
    return ConnectionTarget(
        node=t["node"],
        index=int(t.get("index") or 0),
        type=str(t.get("type") or port),
    )
