# flowlint/checks/reachability.py

from collections import deque
from typing import Dict, List, Optional, Set

import networkx as nx

from flowlint.checks.findings import Finding
from flowlint.config import DEFAULT_CONFIG, RuleConfig
from flowlint.model.document import Node, WorkflowDocument
from flowlint.utils.graph import build_graph, entry_nodes, is_conditional

_ON_STACK, _DONE = 1, 2


def reachable_from(G: nx.DiGraph, entries: List[str]) -> Set[str]:
    """Multi-source BFS; successors are visited in connection order."""
    reachable: Set[str] = set(entries)
    q = deque(entries)
    while q:
        cur = q.popleft()
        for nxt in G.successors(cur):
            if nxt not in reachable:
                reachable.add(nxt)
                q.append(nxt)
    return reachable


def find_cycles(G: nx.DiGraph) -> List[List[str]]:
    """
    Depth-first search with an explicit recursion stack. Every back edge
    u -> v closes the cycle [v, ..., u]; one cycle is returned per back edge,
    in the order the edges are met. Self loops are skipped.
    """
    state: Dict[str, int] = {}
    stack_pos: Dict[str, int] = {}
    cycles: List[List[str]] = []

    for root in G.nodes:
        if root in state:
            continue
        path = [root]
        state[root] = _ON_STACK
        stack_pos[root] = 0
        pending = [iter(G.successors(root))]

        while pending:
            u = path[-1]
            descended = False
            for v in pending[-1]:
                if v == u:
                    continue
                st = state.get(v)
                if st is None:
                    state[v] = _ON_STACK
                    stack_pos[v] = len(path)
                    path.append(v)
                    pending.append(iter(G.successors(v)))
                    descended = True
                    break
                if st == _ON_STACK:
                    cycles.append(path[stack_pos[v]:])
            if not descended:
                pending.pop()
                done = path.pop()
                state[done] = _DONE
                del stack_pos[done]

    return cycles


def _node(G: nx.DiGraph, key: str) -> Optional[Node]:
    return G.nodes[key].get("node")


def _node_id(G: nx.DiGraph, key: str) -> str:
    node = _node(G, key)
    return node.ref if node is not None else key


def _label(G: nx.DiGraph, key: str) -> str:
    node = _node(G, key)
    return node.label if node is not None else key


def reachability_check(
    doc: WorkflowDocument,
    cfg: RuleConfig = DEFAULT_CONFIG,
    G: Optional[nx.DiGraph] = None,
) -> List[Finding]:
    """
    Orphaned nodes and suspicious loops.

    Entry points are trigger-like nodes and chain starts (see utils.graph.entry_nodes).
    Without any entry point the document cannot run: one fatal finding, nothing else.
    Orphans are warnings, and so are loops that run through an entry point
    without any conditional node to break out of them.
    """
    if not doc.nodes:
        return []  # reported by the structural checker

    G = G if G is not None else build_graph(doc)
    entries = entry_nodes(G, cfg)
    if not entries:
        return [Finding.of(
            "no-entry-point",
            "No reachable entry point: no trigger node and no node that starts a chain of connections",
        )]

    findings: List[Finding] = []

    visited = reachable_from(G, entries)
    for key in G.nodes:
        if key not in visited:
            findings.append(Finding.of(
                "orphan-node",
                f"Node '{_label(G, key)}' is not reachable from any trigger or start node and will never run",
                node_id=_node_id(G, key),
            ))

    entry_set = set(entries)
    for cycle in find_cycles(G):
        if entry_set.isdisjoint(cycle):
            continue
        nodes = [_node(G, k) for k in cycle]
        if any(n is not None and is_conditional(n, cfg) for n in nodes):
            continue
        loop = " -> ".join(_label(G, k) for k in cycle + cycle[:1])
        findings.append(Finding.of(
            "potential-infinite-loop",
            f"Potential infinite loop: {loop} (no conditional node on the cycle)",
            node_id=_node_id(G, cycle[0]),
        ))

    return findings
