# flowlint/checks/findings.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from flowlint.exceptions import ReachabilityError, ReferentialError, StructuralError


class Severity(str, Enum):
    FATAL = "fatal"
    WARNING = "warning"


class Category(str, Enum):
    # Declaration order is the order findings appear in a report
    STRUCTURAL = "structural"
    REFERENTIAL = "referential"
    REACHABILITY = "reachability"
    PRODUCTION = "production-pattern"


CATEGORY_ORDER: Tuple[Category, ...] = tuple(Category)


@dataclass(frozen=True)
class Rule:
    code: str
    category: Category
    severity: Severity
    summary: str


_RULE_LIST = [
    Rule("empty-workflow", Category.STRUCTURAL, Severity.FATAL, "Document has no nodes"),
    Rule("missing-field", Category.STRUCTURAL, Severity.FATAL, "Node lacks id, name or type"),
    Rule("invalid-position", Category.STRUCTURAL, Severity.FATAL, "Node position is not two numbers"),
    Rule("duplicate-id", Category.STRUCTURAL, Severity.FATAL, "Two or more nodes share an id"),
    Rule("unknown-source", Category.REFERENTIAL, Severity.FATAL, "Connections listed under an unknown node"),
    Rule("dangling-target", Category.REFERENTIAL, Severity.FATAL, "Connection points at an unknown node"),
    Rule("self-loop", Category.REFERENTIAL, Severity.WARNING, "Node connects to itself"),
    Rule("no-entry-point", Category.REACHABILITY, Severity.FATAL, "No trigger or start node"),
    Rule("orphan-node", Category.REACHABILITY, Severity.WARNING, "Node unreachable from any entry"),
    Rule("potential-infinite-loop", Category.REACHABILITY, Severity.WARNING, "Cycle without a conditional node"),
    Rule("missing-credentials", Category.PRODUCTION, Severity.WARNING, "Trigger/webhook without credentials"),
    Rule("authentication-disabled", Category.PRODUCTION, Severity.WARNING, "Authentication explicitly off"),
    Rule("missing-version-tag", Category.PRODUCTION, Severity.WARNING, "Node has no typeVersion"),
    Rule("incomplete-credential", Category.PRODUCTION, Severity.WARNING, "Credential reference lacks id or name"),
    Rule("no-error-path", Category.PRODUCTION, Severity.WARNING, "No error-handling path in the workflow"),
]

RULES: Dict[str, Rule] = {r.code: r for r in _RULE_LIST}


@dataclass(frozen=True)
class Finding:
    severity: Severity
    category: Category
    message: str
    node_id: Optional[str] = None
    rule: str = ""

    @classmethod
    def of(cls, rule: str, message: str, node_id: Optional[str] = None) -> "Finding":
        """Build a finding whose severity and category come from the rule table."""
        r = RULES[rule]
        return cls(severity=r.severity, category=r.category, message=message, node_id=node_id, rule=rule)

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
        }
        if self.node_id is not None:
            d["nodeId"] = self.node_id
        if self.rule:
            d["rule"] = self.rule
        return d


_ERROR_FOR_CATEGORY = {
    Category.STRUCTURAL: StructuralError,
    Category.REFERENTIAL: ReferentialError,
    Category.REACHABILITY: ReachabilityError,
}


@dataclass(frozen=True)
class ValidationReport:
    findings: Tuple[Finding, ...] = ()
    passed: bool = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "findings", tuple(self.findings))
        object.__setattr__(self, "passed", not any(f.is_fatal for f in self.findings))

    @property
    def fatal(self) -> List[Finding]:
        return [f for f in self.findings if f.is_fatal]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self.findings if not f.is_fatal]

    def by_category(self) -> Dict[Category, List[Finding]]:
        out: Dict[Category, List[Finding]] = {c: [] for c in CATEGORY_ORDER}
        for f in self.findings:
            out[f.category].append(f)
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "findings": [f.to_dict() for f in self.findings],
        }

    def raise_for_fatal(self) -> None:
        """Raise StructuralError / ReferentialError / ReachabilityError if the report failed."""
        fatal = self.fatal
        if not fatal:
            return
        raise _ERROR_FOR_CATEGORY[fatal[0].category](fatal)
