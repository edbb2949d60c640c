# flowlint/checks/production.py

from typing import Any, List

from flowlint.checks.findings import Finding
from flowlint.config import DEFAULT_CONFIG, RuleConfig
from flowlint.model.document import Node, WorkflowDocument
from flowlint.utils.graph import is_error_trigger, is_trigger_like, kind_suffix


def _nonempty(v: Any) -> bool:
    return v is not None and str(v).strip() != ""


def _auth_disabled(value: Any, cfg: RuleConfig) -> bool:
    if value is False:
        return True
    return isinstance(value, str) and value.strip().lower() in cfg.disabled_auth_values


def _incomplete_refs(node: Node) -> List[str]:
    """Credential kinds whose reference lacks an id or a name."""
    bad = []
    for cred_kind, ref in (node.credentials or {}).items():
        if isinstance(ref, dict) and _nonempty(ref.get("id")) and _nonempty(ref.get("name")):
            continue
        # a bare string is a legacy name-only reference: no id
        bad.append(cred_kind)
    return bad


def has_error_path(doc: WorkflowDocument, cfg: RuleConfig = DEFAULT_CONFIG) -> bool:
    """
    True if some node handles errors:
      - an Error Trigger node exists, or
      - a node receives a connection on an error-typed port / output, or
      - a node hangs off the error output n8n adds for onError=continueErrorOutput
        (the last "main" slot of that node).
    """
    if any(is_error_trigger(n, cfg) for n in doc.nodes):
        return True

    for e in doc.edges():
        if doc.resolve(e.target.node) is None:
            continue
        if "error" in e.port.lower() or "error" in e.target.type.lower():
            return True
        src = doc.resolve(e.source)
        if src is None or src.extra.get("onError") != "continueErrorOutput":
            continue
        slots = doc.connections[e.source].get("main", ())
        if e.port == "main" and len(slots) >= 2 and e.slot == len(slots) - 1:
            return True

    return False


def production_check(doc: WorkflowDocument, cfg: RuleConfig = DEFAULT_CONFIG) -> List[Finding]:
    """
    Advisory best-practice rules. Everything here is a warning.
    Per node: credentials on triggers/webhooks, disabled authentication,
    version tag, complete credential references. Then one graph-level
    check for an error-handling path.
    """
    findings: List[Finding] = []

    for node in doc.nodes:
        nid = node.id or None

        if (
            cfg.is_enabled("missing-credentials")
            and is_trigger_like(node, cfg)
            and kind_suffix(node) not in cfg.credential_exempt_kinds
            and not node.credentials
        ):
            findings.append(Finding.of(
                "missing-credentials",
                f"Node '{node.label}' ({node.kind}) has no credential configuration",
                node_id=nid,
            ))

        if cfg.is_enabled("authentication-disabled") and _auth_disabled(node.parameters.get("authentication"), cfg):
            findings.append(Finding.of(
                "authentication-disabled",
                f"Node '{node.label}' has authentication disabled "
                f"(authentication={node.parameters.get('authentication')!r})",
                node_id=nid,
            ))

        if cfg.is_enabled("missing-version-tag") and not _nonempty(node.version_tag):
            findings.append(Finding.of(
                "missing-version-tag",
                f"Node '{node.label}' has no version tag (typeVersion)",
                node_id=nid,
            ))

        if cfg.is_enabled("incomplete-credential"):
            for cred_kind in _incomplete_refs(node):
                findings.append(Finding.of(
                    "incomplete-credential",
                    f"Node '{node.label}' has an incomplete credential reference for '{cred_kind}' "
                    "(needs both id and name)",
                    node_id=nid,
                ))

    if doc.nodes and cfg.is_enabled("no-error-path") and not has_error_path(doc, cfg):
        findings.append(Finding.of(
            "no-error-path",
            "No error handling path detected (no Error Trigger, error output or error-typed connection)",
        ))

    return findings
