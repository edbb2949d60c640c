# utils/graph.py
from typing import List, Optional

import networkx as nx

from flowlint.config import DEFAULT_CONFIG, RuleConfig
from flowlint.model.document import Node, WorkflowDocument


def kind_suffix(node: Node) -> str:
    """'n8n-nodes-base.scheduleTrigger' -> 'scheduletrigger'; plain kinds are lower-cased."""
    return node.kind_lower.rsplit(".", 1)[-1]


def is_trigger_like(node: Node, cfg: RuleConfig = DEFAULT_CONFIG) -> bool:
    k = kind_suffix(node)
    if not k or k in cfg.non_trigger_kinds:
        return False
    if k in cfg.entry_kinds:
        return True
    return any(key in k for key in cfg.trigger_keywords)


def is_conditional(node: Node, cfg: RuleConfig = DEFAULT_CONFIG) -> bool:
    k = kind_suffix(node)
    return k in cfg.conditional_kinds or "condition" in k


def is_error_trigger(node: Node, cfg: RuleConfig = DEFAULT_CONFIG) -> bool:
    return kind_suffix(node) in cfg.error_trigger_kinds


def build_graph(doc: WorkflowDocument) -> nx.DiGraph:
    """
    Build the directed node graph of a document.

    Vertices are Node.key in document order (first occurrence wins on
    duplicate keys) with the Node stored under the "node" attribute.
    Edges come from resolvable connections only; dangling references are
    the referential checker's business. Parallel connections collapse into
    one edge. Edge attribute "ports" lists the (port, slot, type) triples.
    """
    G = nx.DiGraph()
    for n in doc.nodes:
        if n.key not in G:
            G.add_node(n.key, node=n)

    for e in doc.edges():
        src = doc.resolve(e.source)
        tgt = doc.resolve(e.target.node)
        if src is None or tgt is None:
            continue
        u, v = src.key, tgt.key
        if G.has_edge(u, v):
            G.edges[u, v]["ports"].append((e.port, e.slot, e.target.type))
        else:
            G.add_edge(u, v, ports=[(e.port, e.slot, e.target.type)])
    return G


def entry_nodes(G: nx.DiGraph, cfg: RuleConfig = DEFAULT_CONFIG) -> List[str]:
    """
    Entry points in document order: trigger-like nodes, plus nodes that start
    a chain (no inbound, at least one outbound connection). An isolated
    non-trigger node is not an entry; it is an orphan.
    """
    entries = []
    for key, data in G.nodes(data=True):
        node: Optional[Node] = data.get("node")
        inbound = [p for p in G.predecessors(key) if p != key]
        if node is not None and is_trigger_like(node, cfg):
            entries.append(key)
        elif not inbound and any(s != key for s in G.successors(key)):
            entries.append(key)
    return entries
