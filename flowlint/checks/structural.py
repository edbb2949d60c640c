# flowlint/checks/structural.py

from numbers import Real
from typing import Any, Dict, List

from flowlint.checks.findings import Finding
from flowlint.model.document import Node, WorkflowDocument

# Node attribute -> field name in the exported JSON
REQUIRED_FIELDS = (("id", "id"), ("name", "name"), ("kind", "type"))


def _is_number(v: Any) -> bool:
    return isinstance(v, Real) and not isinstance(v, bool)


def position_ok(position: Any) -> bool:
    """Accept n8n's [x, y] and the {"x": .., "y": ..} object form."""
    if isinstance(position, (list, tuple)):
        return len(position) == 2 and all(_is_number(c) for c in position)
    if isinstance(position, dict):
        return _is_number(position.get("x")) and _is_number(position.get("y"))
    return False


def _describe(node: Node) -> str:
    if node.name:
        return f"#{node.index} '{node.name}'"
    return f"#{node.index}"


def structural_check(doc: WorkflowDocument) -> List[Finding]:
    """
    Required fields and well-formedness, in one pass over the nodes:
      1) at least one node
      2) id / name / type present and non-blank
      3) position, when present, is two numbers
      4) ids are unique (one finding per duplicated id)
    """
    findings: List[Finding] = []

    if not doc.nodes:
        findings.append(Finding.of("empty-workflow", "Workflow has no nodes"))
        return findings

    seen: Dict[str, List[Node]] = {}
    for node in doc.nodes:
        for attr, wire_name in REQUIRED_FIELDS:
            value = getattr(node, attr)
            if value is None or not value.strip():
                findings.append(Finding.of(
                    "missing-field",
                    f"Node {_describe(node)} is missing required field '{wire_name}'",
                    node_id=node.id or None,
                ))

        if node.position is not None and not position_ok(node.position):
            findings.append(Finding.of(
                "invalid-position",
                f"Node {_describe(node)} has a non-numeric position: {node.position!r}",
                node_id=node.id or None,
            ))

        if node.id is not None and node.id.strip():
            seen.setdefault(node.id, []).append(node)

    for node_id, occurrences in seen.items():
        if len(occurrences) < 2:
            continue
        where = " and ".join(f"node {_describe(n)}" for n in occurrences)
        findings.append(Finding.of(
            "duplicate-id",
            f"Duplicate node id '{node_id}' used by {where}",
            node_id=node_id,
        ))

    return findings
