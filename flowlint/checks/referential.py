# flowlint/checks/referential.py

from typing import List

from flowlint.checks.findings import Finding
from flowlint.model.document import WorkflowDocument


def referential_check(doc: WorkflowDocument) -> List[Finding]:
    """
    Every connection must start and end at a known node (by name or id).
    Unknown sources and dangling targets are fatal; a node wired to itself
    is only a warning. Nodes without outgoing connections are not reported here.
    """
    findings: List[Finding] = []

    for source, ports in doc.connections.items():
        src = doc.resolve(source)
        if src is None:
            # targets of an unknown source are still checked below
            findings.append(Finding.of(
                "unknown-source",
                f"Connections are defined for unknown node '{source}'",
                node_id=source,
            ))

        for port, slots in ports.items():
            for slot_idx, targets in enumerate(slots):
                for t in targets:
                    tgt = doc.resolve(t.node)
                    if tgt is None:
                        findings.append(Finding.of(
                            "dangling-target",
                            f"Connection '{source}' -> '{t.node}' points to a node that does not exist "
                            f"(output {port}[{slot_idx}])",
                            node_id=t.node,
                        ))
                    elif src is not None and tgt.key == src.key:
                        findings.append(Finding.of(
                            "self-loop",
                            f"Node '{src.label}' is connected to itself (output {port}[{slot_idx}])",
                            node_id=src.ref,
                        ))

    return findings
